"""
Incident layer manager.

This module reconciles the full incident set against the map layers on
every update: it creates, restyles, morphs, removes and orders one layer
per incident entity, and exposes bounds/position queries for auto-fit.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Set
from incident_map.common.geo import union_bounds
from incident_map.core.extent import GeometryExtentCache
from incident_map.core.models import (
    AnimationKind, Bounds, Geometry, Incident, LatLon, LayerStyle, UpdateKind, severity_rank
)
from incident_map.core.normalize import extract_geometry, extract_incident
from incident_map.core.styling import create_feature, polygon_style
from incident_map.core.tracker import IncidentStateTracker
from incident_map.ports.animation import AnimationSignalPort
from incident_map.ports.frame_clock import FrameClockPort
from incident_map.ports.map_surface import MapLayerPort, MapSurfacePort
from incident_map.rendering.transitions import TransitionScheduler
from incident_map.settings import MapSettings
from incident_map.observability import metrics
from incident_map.observability.logging_setup import get_logger

log = get_logger("incidentmap.layers")


@dataclass
class LayerState:
    """엔티티별 레이어 상태 (레이어 매니저 전용)"""
    layer: MapLayerPort
    incident: Incident
    style: LayerStyle
    geometry: Geometry   # 목표(정착) 형상
    rendered: Geometry   # 현재 화면에 그려진 형상


@dataclass
class RenderEntry:
    entity_id: str
    incident: Incident
    geometry: Geometry
    kind: UpdateKind


class IncidentLayerManager:
    """경보 엔티티별 지도 레이어 관리자"""

    def __init__(self,
                 surface: MapSurfacePort,
                 clock: FrameClockPort,
                 settings: Optional[MapSettings] = None,
                 *,
                 animator: Optional[AnimationSignalPort] = None,
                 geodesy=None):
        """
        초기화합니다.

        Args:
            surface: 지도 표면 포트
            clock: 프레임 콜백 포트
            settings: 지도 설정
            animator: 애니메이션 신호 수신자 (없으면 신호 생략)
            geodesy: 범위 계산용 측지 제공자 (없으면 Haversine)
        """
        self.surface = surface
        self.settings = settings or MapSettings()
        self.animator = animator
        self.scheduler = TransitionScheduler(clock)
        self.tracker = IncidentStateTracker()
        # 인스턴스 전용 범위 캐시
        self.extent_cache = GeometryExtentCache(geodesy)

        self._layers: Dict[str, LayerState] = {}
        self._incidents: Dict[str, Incident] = {}

    def update_config(self, settings: MapSettings) -> None:
        """설정을 교체합니다."""
        self.settings = settings

    # ------------------------------------------------------------------
    # 조정(reconciliation)
    # ------------------------------------------------------------------

    def update_incidents(self, states: Mapping[str, Mapping[str, Any]]) -> None:
        """
        현재 경보 엔티티 전체 집합으로 레이어를 조정합니다.

        Args:
            states: {entity_id: state} 형식의 전체 경보 엔티티 상태
        """
        if not self.settings.show_warning_levels:
            self.clear()
            return

        t0 = time.perf_counter()

        incidents: Dict[str, Incident] = {}
        for entity_id, state in states.items():
            incident = extract_incident(entity_id, state)
            if incident is None:
                log.debug(f"좌표 없는 엔티티 제외 entity:{entity_id}")
                continue
            incidents[entity_id] = incident

        # 사라진 엔티티 정리
        for entity_id in self._tracked_ids() - set(incidents):
            self._remove_entity(entity_id)

        entries: List[RenderEntry] = []
        for entity_id, incident in incidents.items():
            kind = self.tracker.classify(entity_id, incident)
            self._incidents[entity_id] = incident

            geometry = extract_geometry(states[entity_id])
            if geometry is None:
                # 마커 전용 엔티티
                self._drop_layer(entity_id)
                self.tracker.record_geometry(entity_id, None)
                continue

            entries.append(RenderEntry(entity_id, incident, geometry, kind))

        # 낮은 심각도부터 그림 (안정 정렬)
        entries.sort(key=lambda e: severity_rank(e.incident.alert_level))

        for entry in entries:
            try:
                self._apply(entry)
            except Exception:
                # 한 엔티티의 실패가 나머지 렌더링을 막지 않음
                metrics.layer_failures.inc()
                log.exception(f"레이어 적용 실패, 다음 업데이트에서 재시도 entity:{entry.entity_id}")
                if entry.entity_id not in self._layers:
                    self.tracker.forget(entry.entity_id)

        self._apply_z_order(entries)
        self.extent_cache.cleanup(self._layers.keys())

        metrics.reconcile_passes.inc()
        metrics.reconcile_seconds.observe(time.perf_counter() - t0)
        self._update_gauges()

        log.debug(f"조정 완료 incidents:{len(self._incidents)} layers:{len(self._layers)} "
                  f"transitions:{self.scheduler.active_count}")

    def _tracked_ids(self) -> Set[str]:
        return set(self._layers) | set(self._incidents) | self.tracker.known_ids()

    def _style_for(self, incident: Incident) -> LayerStyle:
        return polygon_style(
            incident.alert_level,
            self.settings.alert_color_preset,
            self.settings.alert_colors or None,
        )

    def _apply(self, entry: RenderEntry) -> None:
        entity_id, incident, geometry = entry.entity_id, entry.incident, entry.geometry
        style = self._style_for(incident)
        state = self._layers.get(entity_id)

        if state is None:
            layer = self.surface.add_layer(create_feature(incident, geometry, style), style)
            self._layers[entity_id] = LayerState(
                layer=layer, incident=incident, style=style,
                geometry=geometry, rendered=geometry,
            )
            self.tracker.record_geometry(entity_id, geometry)
            metrics.layers_created.inc()
            log.debug(f"레이어 생성 entity:{entity_id} type:{geometry.type} level:{incident.alert_level}")

            if entry.kind == "new":
                self._signal(entity_id, incident, "new")
        else:
            geometry_changed = self.tracker.geometry_changed(entity_id, geometry)
            state.incident = incident
            state.style = style

            if (geometry_changed
                    and self.settings.geometry_transitions
                    and geometry.type != "Point"):
                self._start_transition(entity_id, state, geometry)
            elif geometry_changed or not self.scheduler.is_active(entity_id):
                self.scheduler.cancel(entity_id)
                self._apply_immediately(state, geometry)
            else:
                # 형상은 그대로; 진행 중인 전환이 새 속성으로 이어서 그림
                state.layer.set_style(style)

            self.tracker.record_geometry(entity_id, geometry)

            if entry.kind == "updated":
                self._signal(entity_id, incident, "updated")

        if incident.alert_level == "extreme":
            self._signal(entity_id, incident, "persistent-extreme")

    def _apply_immediately(self, state: LayerState, geometry: Geometry) -> None:
        state.layer.set_data(create_feature(state.incident, geometry, state.style))
        state.layer.set_style(state.style)
        state.geometry = geometry
        state.rendered = geometry

    def _start_transition(self, entity_id: str, state: LayerState, target: Geometry) -> None:
        source = state.rendered
        state.geometry = target

        def on_frame(intermediate: Geometry) -> None:
            state.rendered = intermediate
            state.layer.set_data(create_feature(state.incident, intermediate, state.style))
            state.layer.set_style(state.style)

        def on_complete() -> None:
            # 재표본화된 마지막 프레임 대신 원래 목표 형상으로 정착
            self._apply_immediately(state, target)

        self.scheduler.start(
            entity_id,
            source,
            target,
            self.settings.transition_duration_ms,
            on_frame,
            on_complete,
        )

    def _apply_z_order(self, entries: List[RenderEntry]) -> None:
        """심각도 오름차순으로 맨 앞으로 올려 높은 심각도가 위에 그려지게 합니다."""
        for entry in entries:
            state = self._layers.get(entry.entity_id)
            if state is not None:
                state.layer.bring_to_front()

    def _signal(self, entity_id: str, incident: Incident, kind: AnimationKind) -> None:
        if self.animator is None or not self.settings.animations_enabled:
            return
        self.animator.apply(entity_id, incident.alert_level, kind, self.settings.animation_duration_ms)

    def _drop_layer(self, entity_id: str) -> None:
        self.scheduler.cancel(entity_id)
        state = self._layers.pop(entity_id, None)
        if state is not None:
            state.layer.remove()
            metrics.layers_removed.inc()
            log.debug(f"레이어 제거 entity:{entity_id}")
        self.extent_cache.remove(entity_id)

    def _remove_entity(self, entity_id: str) -> None:
        self._drop_layer(entity_id)
        self._incidents.pop(entity_id, None)
        self.tracker.forget(entity_id)

    def _update_gauges(self) -> None:
        metrics.incident_layers.set(len(self._layers))
        metrics.incidents_tracked.set(len(self._incidents))
        metrics.active_transitions.set(self.scheduler.active_count)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def get_polygon_bounds(self) -> Optional[Bounds]:
        """모든 레이어 경계 상자의 합집합 (레이어가 없으면 None)."""
        return union_bounds(state.layer.get_bounds() for state in self._layers.values())

    def get_incident_positions(self) -> List[LatLon]:
        """모든 경보 중심 좌표 목록 (형상 유무와 무관)."""
        return [incident.position for incident in self._incidents.values()]

    def get_extent(self, entity_id: str) -> float:
        """엔티티 목표 형상의 범위 (미터, 레이어가 없으면 0)."""
        state = self._layers.get(entity_id)
        return self.extent_cache.get_extent(entity_id, state.geometry if state else None)

    def should_show_marker(self, entity_id: str) -> bool:
        """
        폴리곤과 함께 점 마커를 표시할지 결정합니다.

        범위 0(알 수 없음)은 작은 폴리곤으로 취급합니다.
        """
        if not self.settings.hide_markers_for_polygons or not self.settings.show_warning_levels:
            return True

        incident = self._incidents.get(entity_id)
        if incident is None or not incident.has_polygon:
            return True

        state = self._layers.get(entity_id)
        if state is None or state.geometry.type == "Point":
            return True

        return self.get_extent(entity_id) < self.settings.marker_min_extent_m

    def get_rendered_geometry(self, entity_id: str) -> Optional[Geometry]:
        state = self._layers.get(entity_id)
        return state.rendered if state else None

    def is_transitioning(self, entity_id: str) -> bool:
        return self.scheduler.is_active(entity_id)

    @property
    def polygon_count(self) -> int:
        """형상 레이어 수"""
        return len(self._layers)

    @property
    def incident_count(self) -> int:
        """형상 유무와 무관한 경보 수"""
        return len(self._incidents)

    # ------------------------------------------------------------------
    # 정리
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """모든 전환을 취소하고 모든 레이어를 제거합니다."""
        self.scheduler.cancel_all()
        for state in self._layers.values():
            state.layer.remove()
            metrics.layers_removed.inc()
        self._layers.clear()
        self._incidents.clear()
        self.tracker.clear()
        self.extent_cache.clear()
        self._update_gauges()

    def destroy(self) -> None:
        """리소스를 정리합니다 (여러 번 호출해도 안전)."""
        self.clear()
