"""
Stateful rendering engine for incident layers.

This module contains the transition scheduler and the layer manager
that reconciles incidents against the host map surface.
"""

from .transitions import TransitionScheduler, Transition
from .layer_manager import IncidentLayerManager, LayerState

__all__ = ["TransitionScheduler", "Transition", "IncidentLayerManager", "LayerState"]
