"""
Geographic utilities for the incident map engine.

This module provides geodesic distance, bounding boxes over GeoJSON
coordinate payloads and a haversine-backed geodesy provider.
"""

import math
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

# (south, west, north, east) 도 단위
Bounds = Tuple[float, float, float, float]

# 지구 반지름 (미터)
EARTH_RADIUS_M = 6371000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    두 지점 간의 Haversine 거리를 계산합니다 (미터).

    Args:
        lat1: 첫 번째 지점의 위도
        lon1: 첫 번째 지점의 경도
        lat2: 두 번째 지점의 위도
        lon2: 두 번째 지점의 경도

    Returns:
        두 지점 간의 거리 (미터)
    """
    # 도를 라디안으로 변환
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    # 위도와 경도의 차이
    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    # Haversine 공식
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_M


def iter_positions(coordinates) -> Iterator[Sequence[float]]:
    """중첩된 GeoJSON 좌표 배열에서 [경도, 위도] 쌍을 순회합니다."""
    if not isinstance(coordinates, (list, tuple)) or not coordinates:
        return
    if isinstance(coordinates[0], (int, float)):
        if len(coordinates) >= 2:
            yield coordinates
        return
    for item in coordinates:
        yield from iter_positions(item)


def coordinates_bounds(coordinates) -> Optional[Bounds]:
    """
    좌표 배열의 경계 상자를 계산합니다.

    Returns:
        (south, west, north, east) 또는 좌표가 없으면 None
    """
    lons: List[float] = []
    lats: List[float] = []
    for position in iter_positions(coordinates):
        lons.append(float(position[0]))
        lats.append(float(position[1]))

    if not lons:
        return None

    return (min(lats), min(lons), max(lats), max(lons))


def union_bounds(bounds: Iterable[Optional[Bounds]]) -> Optional[Bounds]:
    """여러 경계 상자를 하나로 합칩니다."""
    result: Optional[Bounds] = None
    for b in bounds:
        if b is None:
            continue
        if result is None:
            result = b
        else:
            result = (
                min(result[0], b[0]),
                min(result[1], b[1]),
                max(result[2], b[2]),
                max(result[3], b[3]),
            )
    return result


class HaversineGeodesy:
    """좌표 기반 경계 상자와 Haversine 거리로 구현한 측지 계산기"""

    def bounding_box_of(self, geometry) -> Optional[Bounds]:
        return coordinates_bounds(getattr(geometry, "coordinates", None))

    def distance_between(self, a: Tuple[float, float], b: Tuple[float, float]) -> float:
        return haversine_distance(a[0], a[1], b[0], b[1])


def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유효하면 True
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180
