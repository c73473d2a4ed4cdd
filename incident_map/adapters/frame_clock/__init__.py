"""
Frame clock adapters.
"""

from .asyncio_clock import AsyncioFrameClock

__all__ = ["AsyncioFrameClock"]
