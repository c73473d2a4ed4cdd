"""
IncidentMapOrchestrator 단위 테스트

이 모듈은 스냅샷 수집부터 레이어 조정까지의 흐름을 테스트합니다.
"""

import asyncio
import pytest
from unittest.mock import Mock

from conftest import make_state, square
from incident_map.adapters.replay.ingestor import JsonlReplayIngestor
from incident_map.core.normalize import DEFAULT_ENTITY_PREFIX
from incident_map.orchestrators.orchestrator import IncidentMapOrchestrator


FIRE = f"{DEFAULT_ENTITY_PREFIX}_fire_1"
FLOOD = f"{DEFAULT_ENTITY_PREFIX}_flood_2"


class ListIngest:
    """고정 스냅샷 목록을 내보내는 수집 포트"""

    def __init__(self, snapshots):
        self.snapshots = snapshots

    async def recv(self):
        for snapshot in self.snapshots:
            yield snapshot


class TestOrchestratorInitialization:
    """오케스트레이터 초기화 테스트"""

    def test_defaults(self, manager):
        """기본값 테스트"""
        orchestrator = IncidentMapOrchestrator(ListIngest([]), manager)

        assert orchestrator.entity_prefix == DEFAULT_ENTITY_PREFIX
        assert orchestrator.q.maxsize == 100
        assert orchestrator.processed == 0


class TestProcess:
    """process 메서드 테스트"""

    def test_filters_by_prefix(self, manager, surface):
        """접두사 필터 후 조정 테스트"""
        orchestrator = IncidentMapOrchestrator(ListIngest([]), manager)

        orchestrator.process({
            FIRE: make_state(geojson=square(150, -30)),
            "sensor.temperature": make_state(geojson=square(0, 0)),
        })

        assert surface.draw_order() == [FIRE]
        assert orchestrator.processed == 1

    def test_delegates_to_manager(self):
        """레이어 매니저 위임 테스트"""
        manager = Mock()
        orchestrator = IncidentMapOrchestrator(ListIngest([]), manager, entity_prefix="geo_location.x")

        orchestrator.process({"geo_location.x_1": {}, "geo_location.y_1": {}})

        manager.update_incidents.assert_called_once_with({"geo_location.x_1": {}})


class TestRun:
    """실행 흐름 테스트"""

    async def test_start_processes_all_snapshots(self, manager, surface):
        """모든 스냅샷 처리 테스트"""
        snapshots = [
            {FIRE: make_state(geojson=square(150, -30))},
            {FIRE: make_state(geojson=square(150, -30)), FLOOD: make_state(alert_level="extreme", geojson=square(151, -31))},
            {FLOOD: make_state(alert_level="extreme", geojson=square(151, -31))},
        ]
        orchestrator = IncidentMapOrchestrator(ListIngest(snapshots), manager)

        await asyncio.wait_for(orchestrator.start(), timeout=2.0)

        assert orchestrator.processed == 3
        assert surface.draw_order() == [FLOOD]

    async def test_consumer_survives_errors(self):
        """처리 오류 후 계속 진행 테스트"""
        manager = Mock()
        manager.update_incidents.side_effect = [RuntimeError("boom"), None]
        orchestrator = IncidentMapOrchestrator(ListIngest([{}, {}]), manager)

        await asyncio.wait_for(orchestrator.start(), timeout=2.0)

        assert manager.update_incidents.call_count == 2
        assert orchestrator.processed == 1

    async def test_full_queue_drops_oldest(self):
        """큐 가득 참 시 가장 오래된 스냅샷 드롭 테스트"""
        manager = Mock()
        orchestrator = IncidentMapOrchestrator(
            ListIngest([{"n": 1}, {"n": 2}, {"n": 3}]), manager, queue_maxsize=1,
        )

        # 컨슈머 없이 프로듀서만 실행
        await orchestrator._producer()

        assert orchestrator.q.qsize() == 1
        assert orchestrator.q.get_nowait() == {"n": 3}

    async def test_stop_destroys_manager(self):
        """stop 시 매니저 정리 테스트"""
        manager = Mock()
        orchestrator = IncidentMapOrchestrator(ListIngest([]), manager)

        await orchestrator.stop()

        manager.destroy.assert_called_once()

    async def test_replay_integration(self, manager, surface, write_snapshots):
        """재생 어댑터 통합 테스트"""
        path = write_snapshots([
            [{"entity_id": FIRE, **make_state(alert_level="severe", geojson=square(150, -30))}],
            [{"entity_id": FIRE, **make_state(alert_level="severe", geojson=square(150, -30, 2))}],
        ])
        orchestrator = IncidentMapOrchestrator(JsonlReplayIngestor(path, interval_sec=0), manager)

        await asyncio.wait_for(orchestrator.start(), timeout=2.0)

        assert orchestrator.processed == 2
        assert manager.is_transitioning(FIRE)
