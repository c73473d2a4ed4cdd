"""
In-memory map surface adapter.

This module keeps incident layers as GeoJSON features in draw order
(back to front) and renders them as a FeatureCollection. It also serves
as the geodesy provider for extent measurements.
"""

from typing import Any, Dict, List, Optional, Tuple
from incident_map.common.geo import HaversineGeodesy, coordinates_bounds
from incident_map.core.models import AnimationKind, Bounds, LayerStyle
from incident_map.observability.logging_setup import get_logger

log = get_logger("incidentmap.memory_surface")


def _validate_feature(feature: Dict[str, Any]) -> None:
    geometry = feature.get("geometry") if isinstance(feature, dict) else None
    if not isinstance(geometry, dict):
        raise ValueError("feature has no geometry")
    if not isinstance(geometry.get("type"), str) or not isinstance(geometry.get("coordinates"), list):
        raise ValueError(f"invalid feature geometry: {geometry!r}")


class InMemoryLayer:
    """메모리 벡터 레이어"""

    def __init__(self, surface: "InMemoryMapSurface", layer_id: int,
                 feature: Dict[str, Any], style: LayerStyle):
        self._surface = surface
        self.layer_id = layer_id
        self.feature = feature
        self.style = style
        self.removed = False
        self.data_updates = 0
        self.style_updates = 0

    def set_data(self, feature: Dict[str, Any]) -> None:
        if self.removed:
            return
        _validate_feature(feature)
        self.feature = feature
        self.data_updates += 1

    def set_style(self, style: LayerStyle) -> None:
        if self.removed:
            return
        self.style = style
        self.style_updates += 1

    def remove(self) -> None:
        if self.removed:
            return
        self.removed = True
        self._surface._detach(self)

    def get_bounds(self) -> Optional[Bounds]:
        return coordinates_bounds(self.feature["geometry"].get("coordinates"))

    def bring_to_front(self) -> None:
        if not self.removed:
            self._surface._raise(self)

    @property
    def entity_id(self) -> Optional[str]:
        return self.feature.get("properties", {}).get("id")


class InMemoryMapSurface:
    """메모리 지도 표면 (그리기 순서 유지)"""

    def __init__(self):
        self._layers: List[InMemoryLayer] = []
        self._next_id = 1
        self._geodesy = HaversineGeodesy()

    def add_layer(self, feature: Dict[str, Any], style: LayerStyle) -> InMemoryLayer:
        """
        레이어를 추가합니다 (맨 위에 그려짐).

        Raises:
            ValueError: Feature 형상이 유효하지 않은 경우
        """
        _validate_feature(feature)
        layer = InMemoryLayer(self, self._next_id, feature, style)
        self._next_id += 1
        self._layers.append(layer)
        return layer

    def _detach(self, layer: InMemoryLayer) -> None:
        if layer in self._layers:
            self._layers.remove(layer)

    def _raise(self, layer: InMemoryLayer) -> None:
        self._detach(layer)
        self._layers.append(layer)

    # GeodesyPort
    def bounding_box_of(self, geometry) -> Optional[Bounds]:
        return self._geodesy.bounding_box_of(geometry)

    def distance_between(self, a: Tuple[float, float], b: Tuple[float, float]) -> float:
        return self._geodesy.distance_between(a, b)

    @property
    def layers(self) -> List[InMemoryLayer]:
        """뒤에서 앞 순서의 레이어 목록"""
        return list(self._layers)

    @property
    def layer_count(self) -> int:
        return len(self._layers)

    def draw_order(self) -> List[Optional[str]]:
        """뒤에서 앞 순서의 엔티티 ID 목록"""
        return [layer.entity_id for layer in self._layers]

    def find(self, entity_id: str) -> Optional[InMemoryLayer]:
        for layer in self._layers:
            if layer.entity_id == entity_id:
                return layer
        return None

    def to_feature_collection(self) -> Dict[str, Any]:
        """현재 레이어를 그리기 순서대로 FeatureCollection으로 만듭니다."""
        features = []
        for layer in self._layers:
            feature = dict(layer.feature)
            feature["properties"] = {
                **layer.feature.get("properties", {}),
                "style": layer.style.model_dump(),
            }
            features.append(feature)
        return {"type": "FeatureCollection", "features": features}


class RecordingAnimator:
    """애니메이션 신호를 기록하는 어댑터"""

    def __init__(self):
        self.cues: List[Tuple[str, str, AnimationKind, int]] = []
        self.latest: Dict[str, AnimationKind] = {}

    def apply(self, entity_id: str, alert_level: str, kind: AnimationKind, duration_ms: int) -> None:
        self.cues.append((entity_id, alert_level, kind, duration_ms))
        self.latest[entity_id] = kind
        log.debug(f"애니메이션 신호 entity:{entity_id} level:{alert_level} kind:{kind}")

    def kinds_for(self, entity_id: str) -> List[AnimationKind]:
        return [cue[2] for cue in self.cues if cue[0] == entity_id]
