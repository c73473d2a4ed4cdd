"""
Core domain models and pure functions for the incident map engine.

This module contains the domain models and pure logic (extraction,
interpolation, change detection, extent caching, styling) that are
independent of the host map and event loop.
"""

from .models import (
    Incident, Geometry, PointGeometry, PolygonGeometry, MultiPolygonGeometry,
    LayerStyle, Severity, SEVERITY_ORDER, parse_geometry
)
from .normalize import extract_incident, extract_geometry, has_polygon_data
from .interpolate import interpolate, resample_ring, ease_out_cubic
from .tracker import IncidentStateTracker
from .extent import GeometryExtentCache

__all__ = [
    "Incident", "Geometry", "PointGeometry", "PolygonGeometry", "MultiPolygonGeometry",
    "LayerStyle", "Severity", "SEVERITY_ORDER", "parse_geometry",
    "extract_incident", "extract_geometry", "has_polygon_data",
    "interpolate", "resample_ring", "ease_out_cubic",
    "IncidentStateTracker", "GeometryExtentCache",
]
