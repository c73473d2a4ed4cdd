"""
Normalization functions for incident entities.

This module contains pure functions for converting Home Assistant style
entity states into incidents and validated geometries. Malformed
geometry is filtered to None here and never reaches the engine.
"""

import math
from typing import Any, Dict, Mapping, Optional
from pydantic import ValidationError
from .models import Geometry, Incident, SEVERITY_ORDER, parse_geometry
from incident_map.common.geo import validate_coordinates
from incident_map.observability.logging_setup import get_logger

log = get_logger("incidentmap.normalize")

# ABC Emergency geo_location 엔티티 접두사
DEFAULT_ENTITY_PREFIX = "geo_location.abc_emergency"

SUPPORTED_GEOMETRY_TYPES = ("Point", "Polygon", "MultiPolygon")
POLYGON_GEOMETRY_TYPES = ("Polygon", "MultiPolygon", "GeometryCollection")


def _is_number(value: Any) -> bool:
    return (isinstance(value, (int, float))
            and not isinstance(value, bool)
            and not math.isnan(value))


def normalize_alert_level(raw: Any) -> str:
    """경보 레벨을 소문자로 정규화합니다 (알 수 없으면 minor)."""
    level = str(raw).lower() if raw else "minor"
    return level if level in SEVERITY_ORDER else "minor"


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def extract_incident(entity_id: str, state: Mapping[str, Any]) -> Optional[Incident]:
    """
    엔티티 상태에서 경보 데이터를 추출합니다.

    좌표만 필수이며, 선택 속성은 각각 문자열로 맞추고 타입이 틀려도
    경보를 버리지 않습니다.

    Args:
        entity_id: 엔티티 ID
        state: {"attributes": {...}, "last_updated": ...} 형식의 상태

    Returns:
        Incident 또는 좌표가 없거나 범위를 벗어나면 None
    """
    attrs = state.get("attributes") or {}

    # 지도 배치에 좌표 필수
    lat = attrs.get("latitude")
    lon = attrs.get("longitude")
    if not _is_number(lat) or not _is_number(lon):
        return None
    if not validate_coordinates(lat, lon):
        log.warning(f"좌표 범위 초과 entity:{entity_id} lat:{lat} lon:{lon}")
        return None

    external_link = attrs.get("external_link") or attrs.get("link") or attrs.get("url")

    return Incident(
        id=entity_id,
        headline=str(attrs.get("friendly_name") or entity_id),
        latitude=float(lat),
        longitude=float(lon),
        alert_level=normalize_alert_level(attrs.get("alert_level")),
        alert_text=str(attrs.get("alert_text") or ""),
        event_type=str(attrs.get("event_type") or "unknown"),
        has_polygon=has_polygon_data(state),
        geometry_type=_optional_str(attrs.get("geometry_type")),
        last_updated=_optional_str(state.get("last_updated") or state.get("last_changed")),
        external_link=_optional_str(external_link),
    )


def _is_valid_geometry(obj: Any) -> bool:
    if not isinstance(obj, Mapping):
        return False
    if not isinstance(obj.get("type"), str):
        return False
    if not isinstance(obj.get("coordinates"), list):
        return False
    return obj["type"] in SUPPORTED_GEOMETRY_TYPES


def extract_geometry(state: Mapping[str, Any]) -> Optional[Geometry]:
    """
    엔티티 속성에서 GeoJSON 형상을 추출합니다.

    'geojson' 속성을 우선 확인하고, 없으면 'geometry' 속성을 사용합니다.
    """
    attrs = state.get("attributes") or {}

    for key in ("geojson", "geometry"):
        candidate = attrs.get(key)
        if not candidate or not _is_valid_geometry(candidate):
            continue
        try:
            return parse_geometry(dict(candidate))
        except ValidationError as e:
            log.warning(f"형상 검증 실패 attribute:{key} type:{candidate.get('type')} errors:{e.error_count()}")

    return None


def has_polygon_data(state: Mapping[str, Any]) -> bool:
    """엔티티가 폴리곤 계열 형상을 가지는지 확인합니다."""
    attrs = state.get("attributes") or {}
    geojson = attrs.get("geojson") or attrs.get("geometry")
    if not geojson:
        return False

    geometry_type = None
    if isinstance(geojson, Mapping):
        geometry_type = geojson.get("type")
    geometry_type = geometry_type or attrs.get("geometry_type")
    return geometry_type in POLYGON_GEOMETRY_TYPES


def select_incident_entities(
    states: Mapping[str, Mapping[str, Any]],
    prefix: str = DEFAULT_ENTITY_PREFIX
) -> Dict[str, Mapping[str, Any]]:
    """전체 상태 맵에서 경보 엔티티만 골라냅니다."""
    return {
        entity_id: state
        for entity_id, state in states.items()
        if entity_id.startswith(prefix)
    }
