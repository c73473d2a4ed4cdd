"""
Alert level styling for incident layers.

This module maps alert levels to colours, layer styles, labels and the
feature properties pushed to the map surface.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional
from .models import Geometry, Incident, LayerStyle, SEVERITY_ORDER

# 경보 색상 프리셋
ALERT_COLOR_PRESETS: Dict[str, Dict[str, str]] = {
    "australian": {
        "extreme": "#cc0000",   # Emergency Warning - Red
        "severe": "#ff6600",    # Watch and Act - Orange
        "moderate": "#ffcc00",  # Advice - Yellow
        "minor": "#3366cc",     # Information - Blue
    },
    "us_nws": {
        "extreme": "#cc0000",
        "severe": "#ff6600",
        "moderate": "#ffcc00",
        "minor": "#00bfff",
    },
    "eu_meteo": {
        "extreme": "#cc0000",
        "severe": "#ff6600",
        "moderate": "#ffcc00",
        "minor": "#33cc33",
    },
    "high_contrast": {
        "extreme": "#990000",
        "severe": "#cc5500",
        "moderate": "#ccaa00",
        "minor": "#003399",
    },
}

DEFAULT_PRESET = "australian"

ALERT_LABELS: Dict[str, str] = {
    "extreme": "Emergency Warning",
    "severe": "Watch and Act",
    "moderate": "Advice",
    "minor": "Information",
}

# 기본 폴리곤 스타일
DEFAULT_STROKE_WEIGHT = 2
DEFAULT_STROKE_OPACITY = 0.8
DEFAULT_FILL_OPACITY = 0.35


def resolve_alert_color(
    alert_level: str,
    preset: Optional[str] = None,
    overrides: Optional[Mapping[str, str]] = None
) -> str:
    """
    경보 레벨의 색상을 결정합니다.

    우선순위: 레벨별 사용자 지정 색상 > 프리셋 > australian 기본 팔레트.
    알 수 없는 레벨은 minor로 취급합니다.
    """
    level = alert_level if alert_level in SEVERITY_ORDER else "minor"

    if overrides and overrides.get(level):
        return overrides[level]

    if preset and preset in ALERT_COLOR_PRESETS:
        return ALERT_COLOR_PRESETS[preset][level]

    return ALERT_COLOR_PRESETS[DEFAULT_PRESET][level]


def polygon_style(
    alert_level: str,
    preset: Optional[str] = None,
    overrides: Optional[Mapping[str, str]] = None
) -> LayerStyle:
    """경보 레벨에 맞는 폴리곤 스타일을 만듭니다."""
    color = resolve_alert_color(alert_level, preset, overrides)
    return LayerStyle(
        color=color,
        weight=DEFAULT_STROKE_WEIGHT,
        opacity=DEFAULT_STROKE_OPACITY,
        fill_color=color,
        fill_opacity=DEFAULT_FILL_OPACITY,
    )


def alert_label(alert_level: str) -> str:
    return ALERT_LABELS.get(alert_level, "Information")


def contrast_color(hex_color: str) -> str:
    """배경 휘도에 따라 검정/흰색 글자색을 반환합니다."""
    value = hex_color.lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    try:
        r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        # 색 이름 등 hex가 아닌 값은 흰 글자
        return "#ffffff"

    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return "#000000" if luminance > 0.5 else "#ffffff"


def format_relative_time(timestamp: Optional[str], now: Optional[datetime] = None) -> str:
    """
    타임스탬프를 상대 시간 문자열로 변환합니다 (예: "2 mins ago").

    Args:
        timestamp: ISO 8601 문자열
        now: 기준 시각 (기본값: 현재 UTC)

    Returns:
        상대 시간 문자열, 해석할 수 없으면 빈 문자열
    """
    if not timestamp:
        return ""

    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return ""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    diff_seconds = (now - moment).total_seconds()
    mins = int(diff_seconds // 60)
    hours = int(diff_seconds // 3600)
    days = int(diff_seconds // 86400)

    if mins < 1:
        return "Just now"
    if mins == 1:
        return "1 min ago"
    if mins < 60:
        return f"{mins} mins ago"
    if hours == 1:
        return "1 hour ago"
    if hours < 24:
        return f"{hours} hours ago"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def create_feature(incident: Incident,
                   geometry: Geometry,
                   style: Optional[LayerStyle] = None) -> Dict[str, Any]:
    """
    경보와 형상으로 GeoJSON Feature를 만듭니다.

    style이 주어지면 경보 배지용 글자색(label_color)을 함께 넣습니다.
    """
    feature = {
        "type": "Feature",
        "geometry": geometry.model_dump(),
        "properties": {
            "id": incident.id,
            "headline": incident.headline,
            "alert_level": incident.alert_level,
            "alert_label": alert_label(incident.alert_level),
            "event_type": incident.event_type,
            "alert_text": incident.alert_text,
            "external_link": incident.external_link,
            "updated": format_relative_time(incident.last_updated),
        },
    }
    if style is not None:
        feature["properties"]["label_color"] = contrast_color(style.color)
    return feature
