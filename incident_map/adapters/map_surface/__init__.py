"""
Map surface adapters.

This module contains map surface implementations for the layer manager.
"""

from .memory import InMemoryMapSurface, InMemoryLayer, RecordingAnimator

__all__ = ["InMemoryMapSurface", "InMemoryLayer", "RecordingAnimator"]
