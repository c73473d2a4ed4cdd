"""
Snapshot replay ingestion adapter.

This module replays entity state snapshots from a JSON-lines file.
Each line is either a ``{entity_id: state}`` mapping or a list of Home
Assistant state objects carrying their own ``entity_id``.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Mapping, Optional
from incident_map.observability.logging_setup import get_logger

log = get_logger("incidentmap.replay")


def parse_snapshot(payload: Any) -> Optional[Dict[str, Mapping[str, Any]]]:
    """
    스냅샷 한 줄을 {entity_id: state} 형식으로 변환합니다.

    Returns:
        변환된 스냅샷 또는 형식이 맞지 않으면 None
    """
    if isinstance(payload, list):
        snapshot: Dict[str, Mapping[str, Any]] = {}
        for state in payload:
            if isinstance(state, dict) and isinstance(state.get("entity_id"), str):
                snapshot[state["entity_id"]] = state
        return snapshot

    if isinstance(payload, dict):
        states = payload.get("states", payload)
        if isinstance(states, dict) and all(isinstance(v, dict) for v in states.values()):
            return dict(states)

    return None


class JsonlReplayIngestor:
    """JSON Lines 파일 스냅샷 재생 어댑터"""

    def __init__(self, file_path: str, *, interval_sec: float = 1.0, loop: bool = False):
        """
        초기화합니다.

        Args:
            file_path: 스냅샷 파일 경로
            interval_sec: 스냅샷 간 대기 시간 (초)
            loop: 파일 끝에서 처음부터 다시 재생할지 여부
        """
        self.file_path = Path(file_path)
        self.interval_sec = interval_sec
        self.loop = loop
        self._running = False

    async def recv(self) -> AsyncIterator[Dict[str, Mapping[str, Any]]]:
        self._running = True
        while self._running:
            emitted = 0
            # 파일 읽기는 이벤트 루프 밖에서
            text = await asyncio.to_thread(self.file_path.read_text, encoding="utf-8")
            for line_no, line in enumerate(text.splitlines(), start=1):
                if not self._running:
                    break
                line = line.strip()
                if not line:
                    continue
                try:
                    snapshot = parse_snapshot(json.loads(line))
                except json.JSONDecodeError as e:
                    log.error(f"JSON 파싱 오류 line:{line_no} error:{e}")
                    continue
                if snapshot is None:
                    log.warning(f"스냅샷 형식 불일치 line:{line_no}")
                    continue

                yield snapshot
                emitted += 1
                await asyncio.sleep(self.interval_sec)

            log.info(f"스냅샷 재생 완료 file:{self.file_path} count:{emitted}")
            if not self.loop or emitted == 0:
                break

        self._running = False

    def stop(self) -> None:
        self._running = False
