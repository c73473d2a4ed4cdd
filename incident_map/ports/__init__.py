"""
Port interfaces for the incident map engine.

This module defines the port interfaces (Protocols) that define
the contracts between the engine and the host environment.
"""

from .map_surface import MapSurfacePort, MapLayerPort
from .frame_clock import FrameClockPort, FrameCallback
from .animation import AnimationSignalPort
from .geodesy import GeodesyPort
from .ingest import SnapshotIngestPort

__all__ = [
    "MapSurfacePort", "MapLayerPort", "FrameClockPort", "FrameCallback",
    "AnimationSignalPort", "GeodesyPort", "SnapshotIngestPort",
]
