"""
Orchestrators for the incident map engine.

This module contains the orchestrators that coordinate
the flow between ports and the layer manager.
"""
from .orchestrator import IncidentMapOrchestrator

__all__ = ["IncidentMapOrchestrator"]
