"""
Adapters for the incident map hexagonal architecture.

This module contains the concrete implementations of port interfaces
for the host map surface, frame clock and snapshot ingestion.
"""

from .map_surface import InMemoryMapSurface, InMemoryLayer, RecordingAnimator
from .frame_clock import AsyncioFrameClock
from .replay import JsonlReplayIngestor

__all__ = ["InMemoryMapSurface", "InMemoryLayer", "RecordingAnimator", "AsyncioFrameClock", "JsonlReplayIngestor"]
