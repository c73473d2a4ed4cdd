"""
Geometry interpolation for smooth boundary transitions.

This module contains pure functions that resample coordinate rings to a
common vertex count and linearly blend two geometries of the same type.
Rings are resampled by vertex index, not by arc length.
"""

from .models import (
    Geometry,
    MultiPolygonCoordinates,
    MultiPolygonGeometry,
    PolygonCoordinates,
    PolygonGeometry,
    Position2D,
    Ring,
)

# 서로 다른 형상 타입 간 전환 시점
CUTOVER_PROGRESS = 0.5


def _lerp(a: float, b: float, t: float) -> float:
    # t=0, t=1에서 양 끝값과 정확히 일치
    return a * (1.0 - t) + b * t


def _lerp_position(a: Position2D, b: Position2D, t: float) -> Position2D:
    return [_lerp(a[0], b[0], t), _lerp(a[1], b[1], t)]


def ease_out_cubic(progress: float) -> float:
    """ease-out cubic 이징: 1 - (1 - p)^3"""
    return 1.0 - (1.0 - progress) ** 3


def resample_ring(ring: Ring, target_length: int) -> Ring:
    """
    링을 target_length 개의 점으로 재표본화합니다.

    꼭짓점 인덱스를 기준으로 선형 매개화하고, 각 표본은 가장 가까운
    두 원본 꼭짓점 사이를 선형 보간합니다.

    Args:
        ring: [경도, 위도] 좌표 목록
        target_length: 목표 점 개수

    Returns:
        재표본화된 링 (입력 리스트는 수정하지 않음)
    """
    if not ring or target_length <= 0:
        return []
    if len(ring) == target_length:
        return [list(p) for p in ring]
    if len(ring) == 1 or target_length == 1:
        # 단일 점은 상수로 취급
        return [list(ring[0]) for _ in range(target_length)]

    result: Ring = []
    last_index = len(ring) - 1

    for i in range(target_length):
        position = (i / (target_length - 1)) * last_index
        index = int(position)
        frac = position - index

        if index >= last_index:
            result.append(list(ring[last_index]))
        else:
            result.append(_lerp_position(ring[index], ring[index + 1], frac))

    return result


def interpolate_ring(from_ring: Ring, to_ring: Ring, t: float) -> Ring:
    """
    두 링을 공통 점 개수로 맞춘 뒤 선형 보간합니다.

    한쪽 링이 비어 있으면 대응할 점이 없으므로 중간 지점에서 전환합니다.
    """
    if not from_ring or not to_ring:
        chosen = to_ring if t >= CUTOVER_PROGRESS else from_ring
        return [list(p) for p in chosen]

    count = max(len(from_ring), len(to_ring))
    normalized_from = resample_ring(from_ring, count)
    normalized_to = resample_ring(to_ring, count)

    return [
        _lerp_position(a, b, t)
        for a, b in zip(normalized_from, normalized_to)
    ]


def _borrow(items: list, index: int, empty):
    """인덱스에 항목이 없으면 첫 번째 항목, 그것도 없으면 empty를 반환합니다."""
    if index < len(items):
        return items[index]
    if items:
        return items[0]
    return empty


def interpolate_polygon_coordinates(
    from_rings: PolygonCoordinates,
    to_rings: PolygonCoordinates,
    t: float
) -> PolygonCoordinates:
    """링 단위로 대응시켜 폴리곤 좌표를 보간합니다 (없는 링은 0번 링을 빌림)."""
    ring_count = max(len(from_rings), len(to_rings))
    rings: PolygonCoordinates = []
    for i in range(ring_count):
        rings.append(interpolate_ring(
            _borrow(from_rings, i, []),
            _borrow(to_rings, i, []),
            t
        ))
    return rings


def interpolate_multipolygon_coordinates(
    from_polygons: MultiPolygonCoordinates,
    to_polygons: MultiPolygonCoordinates,
    t: float
) -> MultiPolygonCoordinates:
    """폴리곤 단위, 다시 링 단위로 대응시켜 보간합니다."""
    polygon_count = max(len(from_polygons), len(to_polygons))
    polygons: MultiPolygonCoordinates = []
    for i in range(polygon_count):
        polygons.append(interpolate_polygon_coordinates(
            _borrow(from_polygons, i, [[]]),
            _borrow(to_polygons, i, [[]]),
            t
        ))
    return polygons


def interpolate(from_geometry: Geometry, to_geometry: Geometry, t: float) -> Geometry:
    """
    두 형상 사이의 중간 형상을 계산합니다.

    타입이 다르면 형태를 보존하는 보간이 불가능하므로 t=0.5에서
    전환합니다. Point끼리도 같은 방식으로 전환합니다.

    Args:
        from_geometry: 시작 형상
        to_geometry: 목표 형상
        t: 진행도 (0~1로 클램프)

    Returns:
        보간된 형상
    """
    t = min(max(t, 0.0), 1.0)

    if from_geometry.type != to_geometry.type:
        return to_geometry if t >= CUTOVER_PROGRESS else from_geometry

    if isinstance(from_geometry, PolygonGeometry):
        return PolygonGeometry(coordinates=interpolate_polygon_coordinates(
            from_geometry.coordinates, to_geometry.coordinates, t
        ))

    if isinstance(from_geometry, MultiPolygonGeometry):
        return MultiPolygonGeometry(coordinates=interpolate_multipolygon_coordinates(
            from_geometry.coordinates, to_geometry.coordinates, t
        ))

    # Point
    return to_geometry if t >= CUTOVER_PROGRESS else from_geometry
