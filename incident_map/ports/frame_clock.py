"""
Frame clock port interface.

This module defines the host frame-callback primitive that drives
geometry transitions, one callback per display refresh.
"""

from typing import Any, Callable, Protocol

FrameCallback = Callable[[float], None]

class FrameClockPort(Protocol):
    """프레임 콜백 포트 인터페이스"""

    def now(self) -> float:
        """
        고해상도 현재 시각을 반환합니다.

        Returns:
            밀리초 단위 타임스탬프
        """
        ...

    def request_frame(self, callback: FrameCallback) -> Any:
        """
        다음 프레임에 콜백을 예약합니다.

        Args:
            callback: 밀리초 타임스탬프를 받는 콜백

        Returns:
            취소용 핸들
        """
        ...

    def cancel_frame(self, handle: Any) -> None:
        """
        예약된 프레임 콜백을 동기적으로 취소합니다.

        Args:
            handle: request_frame이 반환한 핸들
        """
        ...
