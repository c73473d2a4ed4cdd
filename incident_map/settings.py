# incident_map/settings.py
from __future__ import annotations
from typing import Dict, List, Literal
from pydantic import BaseModel, Field

class MapSettings(BaseModel):
    show_warning_levels: bool = True
    geometry_transitions: bool = True
    transition_duration_ms: int = 500
    animations_enabled: bool = True
    animation_duration_ms: int = 2000
    hide_markers_for_polygons: bool = True
    marker_min_extent_m: float = 0.0          # 이 값보다 작은 폴리곤은 마커 표시
    alert_color_preset: str = "australian"    # australian|us_nws|eu_meteo|high_contrast
    alert_colors: Dict[str, str] = Field(default_factory=dict)
    entity_prefix: str = "geo_location.abc_emergency"
    frame_interval_ms: float = 16.0

class ReplaySettings(BaseModel):
    file_path: str = "/share/incident_snapshots.jsonl"
    interval_sec: float = 1.0
    loop: bool = False

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "incident-map"
    build_version: str = "0.1.0"
    build_date: str = "2026-10-01"
    log_level: str = "INFO"

class Reliability(BaseModel):
    queue_maxsize: int = 100

class ConfigWarning(BaseModel):
    id: str
    severity: Literal["warning", "info"] = "warning"
    message: str
    suggestion: str | None = None

class Settings(BaseModel):
    # 하위 섹션 (기본값/팩토리로 누락 방지)
    map: MapSettings = Field(default_factory=MapSettings)
    replay: ReplaySettings = Field(default_factory=ReplaySettings)
    observability: Observability = Field(default_factory=Observability)
    reliability: Reliability = Field(default_factory=Reliability)

def validate_visibility_config(map_settings: MapSettings) -> List[ConfigWarning]:
    """서로 충돌하는 표시 옵션을 경고로 반환합니다."""
    warnings: List[ConfigWarning] = []
    if map_settings.hide_markers_for_polygons and not map_settings.show_warning_levels:
        warnings.append(ConfigWarning(
            id="hide-markers-no-effect",
            severity="warning",
            message="hide_markers_for_polygons has no effect when show_warning_levels is false",
            suggestion="Enable show_warning_levels or disable hide_markers_for_polygons",
        ))
    return warnings
