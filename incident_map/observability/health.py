"""
HTTP endpoints for incident map observability.

This module implements health, readiness, metrics, info and layer
inspection endpoints for monitoring and operational visibility.
"""

from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response, JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import time
from incident_map.settings import Settings, validate_visibility_config
from incident_map.rendering.layer_manager import IncidentLayerManager
from incident_map.adapters.map_surface.memory import InMemoryMapSurface
from incident_map.observability.logging_setup import get_logger

log = get_logger("incidentmap.http")

def create_app(settings: Settings,
               manager: Optional[IncidentLayerManager] = None,
               surface: Optional[InMemoryMapSurface] = None) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Incident Geometry Lifecycle Engine"
    )

    start_time = time.time()

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ready" if manager is not None else "starting",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        return Response(
            generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "geometry_transitions": settings.map.geometry_transitions,
            "transition_duration_ms": settings.map.transition_duration_ms,
            "config_warnings": [w.model_dump() for w in validate_visibility_config(settings.map)]
        })

    @app.get("/incidents")
    async def incidents():
        """경보/레이어 요약 엔드포인트"""
        if manager is None:
            raise HTTPException(status_code=503, detail="Layer manager not attached")

        bounds = manager.get_polygon_bounds()
        return JSONResponse({
            "incident_count": manager.incident_count,
            "polygon_count": manager.polygon_count,
            "active_transitions": manager.scheduler.active_ids,
            "bounds": list(bounds) if bounds else None,
            "positions": [list(p) for p in manager.get_incident_positions()]
        })

    @app.get("/layers")
    async def layers():
        """현재 레이어 FeatureCollection 엔드포인트"""
        if surface is None:
            raise HTTPException(status_code=404, detail="No inspectable map surface")
        return JSONResponse(surface.to_feature_collection())

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "incidents": "/incidents",
                "layers": "/layers"
            }
        })

    return app
