"""
asyncio frame clock adapter.

This module implements the frame-callback primitive on the running
asyncio event loop: each frame is a ``call_later`` timer and
cancellation is the timer handle's synchronous ``cancel()``.
"""

import asyncio
from typing import Optional
from incident_map.ports.frame_clock import FrameCallback


class AsyncioFrameClock:
    """asyncio 이벤트 루프 기반 프레임 클록"""

    def __init__(self, frame_interval_ms: float = 16.0,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        초기화합니다.

        Args:
            frame_interval_ms: 프레임 간격 (밀리초)
            loop: 사용할 이벤트 루프 (없으면 실행 중인 루프)
        """
        self.frame_interval_ms = frame_interval_ms
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._get_loop().time() * 1000.0

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = self._get_loop()
        return loop.call_later(
            self.frame_interval_ms / 1000.0,
            lambda: callback(loop.time() * 1000.0)
        )

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()
