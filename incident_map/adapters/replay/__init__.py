"""
Snapshot replay adapters.
"""

from .ingestor import JsonlReplayIngestor, parse_snapshot

__all__ = ["JsonlReplayIngestor", "parse_snapshot"]
