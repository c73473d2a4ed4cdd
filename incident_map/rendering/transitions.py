"""
Geometry transition scheduler.

This module drives per-entity geometry morph animations on the host
frame clock. At most one transition is alive per entity: starting a new
one cancels the previous frame-callback chain first.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from incident_map.core.interpolate import ease_out_cubic, interpolate
from incident_map.core.models import Geometry
from incident_map.ports.frame_clock import FrameClockPort
from incident_map.observability import metrics
from incident_map.observability.logging_setup import get_logger

log = get_logger("incidentmap.transitions")

FrameHandler = Callable[[Geometry], None]
CompleteHandler = Callable[[], None]


@dataclass
class Transition:
    """진행 중인 형상 전환 하나"""
    entity_id: str
    source: Geometry
    target: Geometry
    started_at: float
    duration_ms: float
    handle: Any = field(default=None, repr=False)
    progress: float = 0.0


class TransitionScheduler:
    """엔티티별 형상 전환 애니메이션 스케줄러"""

    def __init__(self,
                 clock: FrameClockPort,
                 *,
                 interpolate_fn: Callable[[Geometry, Geometry, float], Geometry] = interpolate,
                 easing: Callable[[float], float] = ease_out_cubic):
        """
        초기화합니다.

        Args:
            clock: 호스트 프레임 콜백 포트
            interpolate_fn: 형상 보간 함수
            easing: 진행도 이징 함수
        """
        self.clock = clock
        self._interpolate = interpolate_fn
        self._easing = easing
        # 엔티티 ID -> 실행 중인 전환 (취소 핸들 포함)
        self._active: Dict[str, Transition] = {}

    def start(self,
              entity_id: str,
              from_geometry: Geometry,
              to_geometry: Geometry,
              duration_ms: float,
              on_frame: FrameHandler,
              on_complete: Optional[CompleteHandler] = None) -> Transition:
        """
        형상 전환을 시작합니다.

        같은 엔티티에 실행 중인 전환이 있으면 먼저 취소한 뒤 새 체인을
        설치합니다.

        Args:
            entity_id: 엔티티 ID
            from_geometry: 시작 형상
            to_geometry: 목표 형상
            duration_ms: 전환 시간 (밀리초)
            on_frame: 프레임마다 중간 형상을 받는 콜백
            on_complete: 목표 도달 시 한 번 호출되는 콜백

        Returns:
            새 전환
        """
        self.cancel(entity_id)

        transition = Transition(
            entity_id=entity_id,
            source=from_geometry,
            target=to_geometry,
            started_at=self.clock.now(),
            duration_ms=duration_ms,
        )

        def frame(now: float) -> None:
            # 교체/취소된 체인은 아무것도 쓰지 않음
            if self._active.get(entity_id) is not transition:
                return

            elapsed = max(0.0, now - transition.started_at)
            if transition.duration_ms <= 0:
                progress = 1.0
            else:
                progress = min(elapsed / transition.duration_ms, 1.0)
            transition.progress = progress

            try:
                on_frame(self._interpolate(transition.source, transition.target, self._easing(progress)))
            except Exception:
                # 끊긴 체인은 활성 목록에서 제거
                if self._active.get(entity_id) is transition:
                    del self._active[entity_id]
                    metrics.active_transitions.set(len(self._active))
                transition.handle = None
                log.exception(f"형상 전환 프레임 실패 entity:{entity_id}")
                return

            # on_frame 안에서 취소되었을 수 있음
            if self._active.get(entity_id) is not transition:
                return

            if progress < 1.0:
                transition.handle = self.clock.request_frame(frame)
                return

            del self._active[entity_id]
            transition.handle = None
            metrics.transitions_completed.inc()
            metrics.active_transitions.set(len(self._active))
            log.debug(f"형상 전환 완료 entity:{entity_id}")
            if on_complete is not None:
                on_complete()

        self._active[entity_id] = transition
        transition.handle = self.clock.request_frame(frame)

        metrics.transitions_started.inc()
        metrics.active_transitions.set(len(self._active))
        log.debug(f"형상 전환 시작 entity:{entity_id} {from_geometry.type}->{to_geometry.type} duration:{duration_ms}ms")
        return transition

    def cancel(self, entity_id: str) -> bool:
        """
        실행 중인 전환을 취소합니다 (on_complete는 호출되지 않음).

        Returns:
            취소된 전환이 있었으면 True
        """
        transition = self._active.pop(entity_id, None)
        if transition is None:
            return False

        if transition.handle is not None:
            self.clock.cancel_frame(transition.handle)
            transition.handle = None

        metrics.transitions_cancelled.inc()
        metrics.active_transitions.set(len(self._active))
        log.debug(f"형상 전환 취소 entity:{entity_id} progress:{transition.progress:.2f}")
        return True

    def cancel_all(self) -> int:
        """모든 전환을 취소하고 취소된 개수를 반환합니다."""
        entity_ids = list(self._active)
        for entity_id in entity_ids:
            self.cancel(entity_id)
        return len(entity_ids)

    def is_active(self, entity_id: str) -> bool:
        return entity_id in self._active

    def get(self, entity_id: str) -> Optional[Transition]:
        return self._active.get(entity_id)

    @property
    def active_ids(self) -> List[str]:
        return list(self._active)

    @property
    def active_count(self) -> int:
        return len(self._active)
