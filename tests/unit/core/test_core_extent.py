"""
GeometryExtentCache 단위 테스트

이 모듈은 형상 범위 계산과 해시 기반 캐시 무효화를 테스트합니다.
"""

import pytest
from unittest.mock import Mock

from incident_map.common.geo import HaversineGeodesy
from incident_map.core.extent import GeometryExtentCache, compute_extent_meters
from incident_map.core.models import PointGeometry, PolygonGeometry


SQUARE = PolygonGeometry(coordinates=[[[151.0, -33.0], [151.1, -33.0], [151.1, -32.9], [151.0, -32.9], [151.0, -33.0]]])
WIDE = PolygonGeometry(coordinates=[[[151.0, -33.0], [152.0, -33.0], [152.0, -32.9], [151.0, -32.9], [151.0, -33.0]]])


class CountingGeodesy(HaversineGeodesy):
    """호출 횟수를 세는 측지 계산기"""

    def __init__(self):
        self.bbox_calls = 0

    def bounding_box_of(self, geometry):
        self.bbox_calls += 1
        return super().bounding_box_of(geometry)


class TestComputeExtent:
    """compute_extent_meters 함수 테스트"""

    def test_square_extent(self):
        """0.1도 정사각형 범위 테스트"""
        extent = compute_extent_meters(SQUARE, HaversineGeodesy())
        # 위도 0.1도 ~ 11.1km
        assert extent == pytest.approx(11120, rel=0.01)

    def test_width_dominates(self):
        """너비가 더 큰 경우 테스트"""
        extent = compute_extent_meters(WIDE, HaversineGeodesy())
        # 남위 33도에서 경도 1도 ~ 93km
        assert extent == pytest.approx(93300, rel=0.01)

    def test_point_is_zero(self):
        """Point 범위 0 테스트"""
        assert compute_extent_meters(PointGeometry(coordinates=[151.0, -33.0]), HaversineGeodesy()) == 0.0

    def test_no_bounds_is_zero(self):
        """경계 없음 테스트"""
        geodesy = Mock()
        geodesy.bounding_box_of.return_value = None
        assert compute_extent_meters(SQUARE, geodesy) == 0.0

    def test_geodesy_failure_is_zero(self):
        """측지 계산 실패 시 0 테스트"""
        geodesy = Mock()
        geodesy.bounding_box_of.side_effect = RuntimeError("boom")
        assert compute_extent_meters(SQUARE, geodesy) == 0.0


class TestGeometryExtentCache:
    """GeometryExtentCache 클래스 테스트"""

    def test_none_geometry_returns_zero(self):
        """None 형상 테스트"""
        cache = GeometryExtentCache()
        assert cache.get_extent("a", None) == 0.0
        assert "a" not in cache

    def test_cache_hit_skips_recompute(self):
        """캐시 HIT 재계산 생략 테스트"""
        geodesy = CountingGeodesy()
        cache = GeometryExtentCache(geodesy)

        first = cache.get_extent("a", SQUARE)
        second = cache.get_extent("a", SQUARE)

        assert first == second
        assert geodesy.bbox_calls == 1

    def test_equal_content_new_object_is_hit(self):
        """내용이 같은 새 객체도 HIT 테스트"""
        geodesy = CountingGeodesy()
        cache = GeometryExtentCache(geodesy)

        cache.get_extent("a", SQUARE)
        cache.get_extent("a", PolygonGeometry(coordinates=SQUARE.coordinates))

        assert geodesy.bbox_calls == 1

    def test_geometry_change_recomputes(self):
        """형상 변경 시 재계산 테스트"""
        geodesy = CountingGeodesy()
        cache = GeometryExtentCache(geodesy)

        small = cache.get_extent("a", SQUARE)
        large = cache.get_extent("a", WIDE)

        assert geodesy.bbox_calls == 2
        assert large > small

    def test_entries_are_per_entity(self):
        """엔티티별 항목 테스트"""
        geodesy = CountingGeodesy()
        cache = GeometryExtentCache(geodesy)

        cache.get_extent("a", SQUARE)
        cache.get_extent("b", SQUARE)

        assert geodesy.bbox_calls == 2
        assert cache.size == 2

    def test_remove_forces_fresh_computation(self):
        """제거 후 새로 계산 테스트"""
        geodesy = CountingGeodesy()
        cache = GeometryExtentCache(geodesy)

        cache.get_extent("a", SQUARE)
        cache.remove("a")
        cache.get_extent("a", SQUARE)

        assert geodesy.bbox_calls == 2

    def test_cleanup_removes_stale(self):
        """비활성 항목 정리 테스트"""
        cache = GeometryExtentCache()
        cache.get_extent("a", SQUARE)
        cache.get_extent("b", SQUARE)
        cache.get_extent("c", SQUARE)

        removed = cache.cleanup(["b"])

        assert removed == 2
        assert "b" in cache
        assert "a" not in cache
        assert cache.size == 1

    def test_failure_is_cached_as_zero(self):
        """계산 실패 결과 캐시 테스트"""
        geodesy = Mock()
        geodesy.bounding_box_of.side_effect = ValueError("bad")
        cache = GeometryExtentCache(geodesy)

        assert cache.get_extent("a", SQUARE) == 0.0
        assert "a" in cache

    def test_clear(self):
        """clear 테스트"""
        cache = GeometryExtentCache()
        cache.get_extent("a", SQUARE)
        cache.clear()
        assert cache.size == 0

    def test_instances_do_not_share_state(self):
        """인스턴스 간 캐시 격리 테스트"""
        first = GeometryExtentCache()
        second = GeometryExtentCache()
        first.get_extent("a", SQUARE)

        assert "a" in first
        assert "a" not in second
