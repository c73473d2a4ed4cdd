"""
Map surface port interface.

This module defines the protocol for the host 2-D map: adding vector
layers and mutating or removing them.
"""

from typing import Any, Dict, Optional, Protocol
from incident_map.core.models import Bounds, LayerStyle

class MapLayerPort(Protocol):
    """지도 벡터 레이어 포트 인터페이스"""

    def set_data(self, feature: Dict[str, Any]) -> None:
        """
        레이어의 GeoJSON Feature를 교체합니다.

        Args:
            feature: GeoJSON Feature
        """
        ...

    def set_style(self, style: LayerStyle) -> None:
        """
        레이어 스타일을 적용합니다.

        Args:
            style: 레이어 스타일
        """
        ...

    def remove(self) -> None:
        """레이어를 지도에서 제거합니다."""
        ...

    def get_bounds(self) -> Optional[Bounds]:
        """
        레이어의 경계 상자를 반환합니다.

        Returns:
            (south, west, north, east) 또는 유효하지 않으면 None
        """
        ...

    def bring_to_front(self) -> None:
        """레이어를 그리기 순서의 맨 위로 올립니다."""
        ...

class MapSurfacePort(Protocol):
    """지도 표면 포트 인터페이스"""

    def add_layer(self, feature: Dict[str, Any], style: LayerStyle) -> MapLayerPort:
        """
        새 벡터 레이어를 추가합니다.

        Args:
            feature: GeoJSON Feature
            style: 레이어 스타일

        Returns:
            추가된 레이어 핸들
        """
        ...
