"""
Incident state tracking for change detection.

This module classifies each observed incident as new, updated or
unchanged, and separately detects geometry changes by coordinate hash.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Dict, Optional, Set
from .models import Geometry, Incident, UpdateKind


def hash_incident(incident: Incident) -> str:
    """팝업/스타일에 영향을 주는 속성을 이어붙인 해시를 만듭니다."""
    return f"{incident.alert_level}|{incident.headline}|{incident.alert_text}|{incident.last_updated}"


def hash_coordinates(coordinates) -> str:
    """좌표 페이로드의 내용 해시를 계산합니다."""
    payload = json.dumps(coordinates, separators=(",", ":"))
    return hashlib.sha256(payload.encode()).hexdigest()


def hash_geometry(geometry: Geometry) -> str:
    """형상 좌표의 내용 해시를 계산합니다."""
    return hash_coordinates(geometry.coordinates)


@dataclass
class TrackedIncident:
    """엔티티별 마지막 관측 상태"""
    attribute_hash: str
    geometry_hash: Optional[str] = None


class IncidentStateTracker:
    """엔티티별 속성 해시와 형상 해시를 추적합니다."""

    def __init__(self):
        self._records: Dict[str, TrackedIncident] = {}

    def classify(self, entity_id: str, incident: Incident) -> UpdateKind:
        """
        업데이트를 new / updated / unchanged 중 하나로 분류합니다.

        호출할 때마다 새 속성 해시를 저장하므로 다음 호출은 최신 상태와
        비교합니다.
        """
        current = hash_incident(incident)
        record = self._records.get(entity_id)

        if record is None:
            self._records[entity_id] = TrackedIncident(attribute_hash=current)
            return "new"

        previous = record.attribute_hash
        record.attribute_hash = current
        return "updated" if previous != current else "unchanged"

    def geometry_changed(self, entity_id: str, geometry: Geometry) -> bool:
        """기록된 형상 해시와 다르면 True (기록이 없으면 False)."""
        record = self._records.get(entity_id)
        if record is None or record.geometry_hash is None:
            return False
        return record.geometry_hash != hash_geometry(geometry)

    def record_geometry(self, entity_id: str, geometry: Optional[Geometry]) -> None:
        """엔티티의 최신 형상 해시를 저장합니다."""
        record = self._records.get(entity_id)
        if record is None:
            return
        record.geometry_hash = hash_geometry(geometry) if geometry is not None else None

    def is_known(self, entity_id: str) -> bool:
        return entity_id in self._records

    def forget(self, entity_id: str) -> None:
        self._records.pop(entity_id, None)

    def known_ids(self) -> Set[str]:
        return set(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)
