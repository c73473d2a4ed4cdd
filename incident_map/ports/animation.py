"""
Animation signal port interface.

This module defines the styling collaborator that turns animation cues
into visual treatment. The engine only signals which cue occurred.
"""

from typing import Protocol
from incident_map.core.models import AnimationKind

class AnimationSignalPort(Protocol):
    """애니메이션 신호 포트 인터페이스"""

    def apply(self, entity_id: str, alert_level: str, kind: AnimationKind, duration_ms: int) -> None:
        """
        엔티티 레이어에 애니메이션 신호를 적용합니다.

        Args:
            entity_id: 엔티티 ID
            alert_level: 경보 레벨
            kind: new / updated / persistent-extreme
            duration_ms: 애니메이션 길이 (밀리초)
        """
        ...
