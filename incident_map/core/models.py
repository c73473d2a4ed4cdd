"""
Core domain models for the incident map engine.

This module defines the incident, geometry and style models using
Pydantic v2. Geometry is a closed tagged union discriminated on ``type``.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from incident_map.common.geo import Bounds

# 심각도 타입 정의 (낮음 -> 높음)
Severity = Literal["minor", "moderate", "severe", "extreme"]

SEVERITY_ORDER: Dict[str, int] = {
    "minor": 0,
    "moderate": 1,
    "severe": 2,
    "extreme": 3
}

# 좌표 구조 ([경도, 위도] 순서)
Position2D = List[float]
Ring = List[Position2D]
PolygonCoordinates = List[Ring]
MultiPolygonCoordinates = List[PolygonCoordinates]

# (위도, 경도)
LatLon = Tuple[float, float]

UpdateKind = Literal["new", "updated", "unchanged"]
AnimationKind = Literal["new", "updated", "persistent-extreme"]


class PointGeometry(BaseModel):
    """Point 형상"""
    model_config = ConfigDict(frozen=True)

    type: Literal["Point"] = "Point"
    coordinates: Position2D


class PolygonGeometry(BaseModel):
    """Polygon 형상 (링 목록)"""
    model_config = ConfigDict(frozen=True)

    type: Literal["Polygon"] = "Polygon"
    coordinates: PolygonCoordinates


class MultiPolygonGeometry(BaseModel):
    """MultiPolygon 형상 (폴리곤 좌표 목록)"""
    model_config = ConfigDict(frozen=True)

    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: MultiPolygonCoordinates


Geometry = Annotated[
    Union[PointGeometry, PolygonGeometry, MultiPolygonGeometry],
    Field(discriminator="type"),
]

_geometry_adapter: TypeAdapter = TypeAdapter(Geometry)


def parse_geometry(raw: Dict[str, Any]):
    """
    원시 GeoJSON 매핑을 Geometry 유니온으로 검증합니다.

    Raises:
        pydantic.ValidationError: 형식이 맞지 않는 경우
    """
    return _geometry_adapter.validate_python(raw)


class Incident(BaseModel):
    """경보 엔티티 하나"""
    model_config = ConfigDict(frozen=True)

    id: str
    headline: str
    latitude: float
    longitude: float
    alert_level: Severity = "minor"
    alert_text: str = ""
    event_type: str = "unknown"
    has_polygon: bool = False
    geometry_type: Optional[str] = None
    last_updated: Optional[str] = None
    external_link: Optional[str] = None

    @property
    def position(self) -> LatLon:
        return (self.latitude, self.longitude)


class LayerStyle(BaseModel):
    """벡터 레이어 스타일"""
    model_config = ConfigDict(frozen=True)

    color: str
    weight: int = 2
    opacity: float = 0.8
    fill_color: str
    fill_opacity: float = 0.35


def severity_rank(level: str) -> int:
    """심각도 순위를 반환합니다 (알 수 없는 값은 minor)."""
    return SEVERITY_ORDER.get(level, 0)
