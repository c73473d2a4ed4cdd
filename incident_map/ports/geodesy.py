"""
Geodesy port interface.

This module defines the bounding-box and geodesic distance primitives
the extent cache consumes from the map projection.
"""

from typing import Optional, Protocol
from incident_map.core.models import Bounds, LatLon

class GeodesyPort(Protocol):
    """측지 계산 포트 인터페이스"""

    def bounding_box_of(self, geometry) -> Optional[Bounds]:
        """
        형상의 경계 상자를 계산합니다.

        Args:
            geometry: 대상 형상

        Returns:
            (south, west, north, east) 또는 None
        """
        ...

    def distance_between(self, a: LatLon, b: LatLon) -> float:
        """
        두 (위도, 경도) 지점 간 측지 거리를 계산합니다 (미터).
        """
        ...
