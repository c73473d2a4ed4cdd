# incident_map/main.py
import os, asyncio, signal
from typing import Optional
import uvicorn
from incident_map.settings import Settings, validate_visibility_config
from incident_map.observability.health import create_app
from incident_map.observability.logging_setup import setup_logger, get_logger
from incident_map.adapters.map_surface.memory import InMemoryMapSurface, RecordingAnimator
from incident_map.adapters.frame_clock.asyncio_clock import AsyncioFrameClock
from incident_map.adapters.replay.ingestor import JsonlReplayIngestor
from incident_map.rendering.layer_manager import IncidentLayerManager
from incident_map.orchestrators.orchestrator import IncidentMapOrchestrator

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings()

    # 지도
    s.map.show_warning_levels = _b("SHOW_WARNING_LEVELS", s.map.show_warning_levels)
    s.map.geometry_transitions = _b("GEOMETRY_TRANSITIONS", s.map.geometry_transitions)
    s.map.transition_duration_ms = int(os.getenv("TRANSITION_DURATION_MS", s.map.transition_duration_ms))
    s.map.animations_enabled = _b("ANIMATIONS_ENABLED", s.map.animations_enabled)
    s.map.animation_duration_ms = int(os.getenv("ANIMATION_DURATION_MS", s.map.animation_duration_ms))
    s.map.hide_markers_for_polygons = _b("HIDE_MARKERS_FOR_POLYGONS", s.map.hide_markers_for_polygons)
    s.map.marker_min_extent_m = float(os.getenv("MARKER_MIN_EXTENT_M", s.map.marker_min_extent_m))
    s.map.alert_color_preset = os.getenv("ALERT_COLOR_PRESET", s.map.alert_color_preset)
    s.map.entity_prefix = os.getenv("ENTITY_PREFIX", s.map.entity_prefix)
    s.map.frame_interval_ms = float(os.getenv("FRAME_INTERVAL_MS", s.map.frame_interval_ms))

    # 재생
    s.replay.file_path = os.getenv("REPLAY_FILE", s.replay.file_path)
    s.replay.interval_sec = float(os.getenv("REPLAY_INTERVAL_SEC", s.replay.interval_sec))
    s.replay.loop = _b("REPLAY_LOOP", s.replay.loop)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("METRICS_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)

    # 신뢰성
    s.reliability.queue_maxsize = int(os.getenv("QUEUE_MAXSIZE", s.reliability.queue_maxsize))

    return s

async def start_http(settings: Settings, manager: IncidentLayerManager,
                     surface: InMemoryMapSurface) -> Optional[asyncio.Task]:
    if not settings.observability.metrics_enabled: return None
    app = create_app(settings, manager, surface)
    return asyncio.create_task(uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=settings.observability.http_port, log_level="info")
    ).serve())

async def main():
    s = build_settings()
    setup_logger(s.observability.log_level)
    log = get_logger()
    log.info("설정 로드 완료")

    for warning in validate_visibility_config(s.map):
        log.warning(f"설정 경고 {warning.id}: {warning.message}")

    surface = InMemoryMapSurface()
    clock = AsyncioFrameClock(s.map.frame_interval_ms)
    manager = IncidentLayerManager(surface, clock, s.map, animator=RecordingAnimator(), geodesy=surface)

    ingest = JsonlReplayIngestor(s.replay.file_path, interval_sec=s.replay.interval_sec, loop=s.replay.loop)
    orch = IncidentMapOrchestrator(
        ingest, manager,
        entity_prefix=s.map.entity_prefix,
        queue_maxsize=s.reliability.queue_maxsize,
    )
    log.info("오케스트레이터 생성 완료")

    http_task = await start_http(s, manager, surface)
    if http_task:
        log.info("HTTP 서버 시작됨")

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    log.info("오케스트레이터 시작")
    orch_task = asyncio.create_task(orch.start())
    await stop
    orch_task.cancel()
    await orch.stop()
    if http_task: http_task.cancel()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
