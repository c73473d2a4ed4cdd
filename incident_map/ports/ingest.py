"""
Snapshot ingestion port interface.

This module defines the protocol for receiving full entity state
snapshots from the data provider.
"""

from typing import Any, AsyncIterator, Dict, Mapping, Protocol

class SnapshotIngestPort(Protocol):
    """상태 스냅샷 수집 포트 인터페이스"""

    async def recv(self) -> AsyncIterator[Dict[str, Mapping[str, Any]]]:
        """
        엔티티 상태 스냅샷을 비동기적으로 수신합니다.

        Yields:
            {entity_id: state} 딕셔너리
        """
        ...
