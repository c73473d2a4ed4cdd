"""
Geometry extent cache.

This module memoizes the maximum bounding-box dimension (in meters) of
each entity's geometry, invalidated by a hash of the coordinate payload.
One cache is owned by each layer manager instance.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional
from .models import Geometry
from .tracker import hash_geometry
from incident_map.common.geo import HaversineGeodesy
from incident_map.observability import metrics
from incident_map.observability.logging_setup import get_logger

log = get_logger("incidentmap.extent")


@dataclass(frozen=True)
class ExtentCacheEntry:
    """캐시 항목 (좌표 해시, 범위 미터)"""
    hash: str
    extent: float


def compute_extent_meters(geometry: Geometry, geodesy) -> float:
    """
    형상 경계 상자의 너비/높이 중 큰 값을 미터로 계산합니다.

    경계를 계산할 수 없거나 측지 계산이 실패하면 0을 반환합니다.
    """
    try:
        bounds = geodesy.bounding_box_of(geometry)
        if bounds is None:
            return 0.0

        south, west, north, east = bounds
        width = geodesy.distance_between((north, west), (north, east))
        height = geodesy.distance_between((south, east), (north, east))
        return max(width, height)
    except Exception as e:
        log.warning(f"형상 범위 계산 실패 type:{getattr(geometry, 'type', None)} error:{e}")
        return 0.0


class GeometryExtentCache:
    """엔티티별 형상 범위 캐시"""

    def __init__(self, geodesy=None):
        """
        초기화합니다.

        Args:
            geodesy: 경계 상자/측지 거리 제공자 (GeodesyPort)
        """
        self._geodesy = geodesy or HaversineGeodesy()
        self._cache: Dict[str, ExtentCacheEntry] = {}

    def get_extent(self, entity_id: str, geometry: Optional[Geometry]) -> float:
        """
        캐시된 범위를 반환하거나 계산 후 저장합니다.

        Args:
            entity_id: 캐시 키로 쓰는 엔티티 ID
            geometry: 대상 형상 (None이면 0)

        Returns:
            범위 (미터)
        """
        if geometry is None:
            return 0.0

        digest = hash_geometry(geometry)
        cached = self._cache.get(entity_id)

        if cached is not None and cached.hash == digest:
            metrics.extent_cache_lookups.labels(result="hit").inc()
            log.debug(f"범위 캐시 HIT entity:{entity_id}")
            return cached.extent

        extent = compute_extent_meters(geometry, self._geodesy)
        self._cache[entity_id] = ExtentCacheEntry(hash=digest, extent=extent)

        metrics.extent_cache_lookups.labels(result="miss").inc()
        reason = "geometry changed" if cached is not None else "new entry"
        log.debug(f"범위 캐시 MISS entity:{entity_id} ({reason}) extent:{round(extent)}m")
        return extent

    def remove(self, entity_id: str) -> None:
        """엔티티 하나를 캐시에서 제거합니다."""
        self._cache.pop(entity_id, None)

    def cleanup(self, active_ids: Iterable[str]) -> int:
        """
        active_ids에 없는 항목을 제거합니다.

        Returns:
            제거된 항목 수
        """
        active = set(active_ids)
        stale = [entity_id for entity_id in self._cache if entity_id not in active]
        for entity_id in stale:
            del self._cache[entity_id]
        if stale:
            log.debug(f"범위 캐시 정리 removed:{len(stale)}")
        return len(stale)

    def clear(self) -> None:
        self._cache.clear()

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._cache

    @property
    def size(self) -> int:
        return len(self._cache)
