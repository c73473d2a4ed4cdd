"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import inspect
import json
import os
import tempfile
from typing import Callable, Dict, List, Optional

import pytest
from incident_map.settings import MapSettings, Settings
from incident_map.adapters.map_surface.memory import InMemoryMapSurface, RecordingAnimator
from incident_map.rendering.layer_manager import IncidentLayerManager


class FakeFrameClock:
    """수동으로 진행시키는 프레임 클록"""

    def __init__(self, start_ms: float = 0.0):
        self.time_ms = start_ms
        self._pending: Dict[int, Callable[[float], None]] = {}
        self._next_handle = 1
        self.cancelled: List[int] = []

    def now(self) -> float:
        return self.time_ms

    def request_frame(self, callback: Callable[[float], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self.cancelled.append(handle)
        self._pending.pop(handle, None)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def tick(self, now_ms: float) -> int:
        """
        시각을 now_ms로 옮기고 대기 중인 콜백을 한 번씩 실행합니다.

        Returns:
            실행된 콜백 수
        """
        self.time_ms = now_ms
        batch = list(self._pending.items())
        self._pending.clear()
        ran = 0
        for handle, callback in batch:
            if handle in self.cancelled:
                continue
            callback(now_ms)
            ran += 1
        return ran

    def run_until_idle(self, step_ms: float = 16.0, limit: int = 1000) -> None:
        """대기 콜백이 없어질 때까지 프레임을 진행합니다."""
        for _ in range(limit):
            if not self._pending:
                return
            self.tick(self.time_ms + step_ms)
        raise AssertionError("frame clock did not settle")


def make_state(lat: float = -33.0,
               lon: float = 151.0,
               alert_level: str = "minor",
               headline: str = "Test Fire",
               geojson: Optional[dict] = None,
               last_updated: str = "2026-10-01T00:00:00Z",
               **extra) -> dict:
    """HA geo_location 엔티티 상태를 만듭니다."""
    attributes = {
        "latitude": lat,
        "longitude": lon,
        "friendly_name": headline,
        "alert_level": alert_level,
        "alert_text": extra.pop("alert_text", ""),
        "event_type": extra.pop("event_type", "bushfire"),
    }
    if geojson is not None:
        attributes["geojson"] = geojson
    attributes.update(extra)
    return {"attributes": attributes, "last_updated": last_updated}


def square(lon: float, lat: float, size: float = 1.0) -> dict:
    """닫힌 정사각형 Polygon GeoJSON"""
    return {
        "type": "Polygon",
        "coordinates": [[
            [lon, lat],
            [lon + size, lat],
            [lon + size, lat + size],
            [lon, lat + size],
            [lon, lat],
        ]],
    }


@pytest.fixture
def clock():
    """테스트용 프레임 클록"""
    return FakeFrameClock()


@pytest.fixture
def surface():
    """테스트용 메모리 지도 표면"""
    return InMemoryMapSurface()


@pytest.fixture
def animator():
    """테스트용 애니메이션 기록기"""
    return RecordingAnimator()


@pytest.fixture
def map_settings():
    """테스트용 지도 설정"""
    return MapSettings()


@pytest.fixture
def manager(surface, clock, map_settings, animator):
    """테스트용 레이어 매니저"""
    m = IncidentLayerManager(surface, clock, map_settings, animator=animator, geodesy=surface)
    yield m
    m.destroy()


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    return settings


@pytest.fixture
def temp_file_path():
    """임시 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix=".jsonl", delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def write_snapshots(temp_file_path):
    """스냅샷 목록을 JSON Lines 파일로 기록"""
    def _write(lines: List[object]) -> str:
        with open(temp_file_path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line if isinstance(line, str) else json.dumps(line))
                f.write("\n")
        return temp_file_path
    return _write


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "asyncio: 비동기 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )


def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        # 비동기 테스트에 asyncio 마커 추가
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)

        # 통합 테스트 마커 추가
        if "integration" in item.name:
            item.add_marker(pytest.mark.integration)
