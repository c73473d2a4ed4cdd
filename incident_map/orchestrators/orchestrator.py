"""
Incident map orchestrator.

This module connects snapshot ingestion to the layer manager: a
producer queues full state snapshots and a consumer runs one
reconciliation pass per snapshot on the event loop.
"""

import asyncio
import time
from typing import Any, Dict, List, Mapping
from incident_map.core.normalize import DEFAULT_ENTITY_PREFIX, select_incident_entities
from incident_map.ports.ingest import SnapshotIngestPort
from incident_map.rendering.layer_manager import IncidentLayerManager
from incident_map.observability import metrics
from incident_map.observability.logging_setup import get_logger

log = get_logger("incidentmap.orchestrator")

Snapshot = Dict[str, Mapping[str, Any]]

class IncidentMapOrchestrator:
    """스냅샷 수집 -> 레이어 조정 오케스트레이터"""

    def __init__(self,
                 ingest: SnapshotIngestPort,
                 manager: IncidentLayerManager,
                 *,
                 entity_prefix: str = DEFAULT_ENTITY_PREFIX,
                 queue_maxsize: int = 100,
                 metrics_interval_sec: float = 30.0):
        """
        초기화합니다.

        Args:
            ingest: 스냅샷 수집 포트
            manager: 레이어 매니저
            entity_prefix: 경보 엔티티 ID 접두사
            queue_maxsize: 큐 최대 크기
            metrics_interval_sec: 업타임 메트릭 갱신 주기 (초)
        """
        self.ingest = ingest
        self.manager = manager
        self.entity_prefix = entity_prefix
        self.q: asyncio.Queue = asyncio.Queue(maxsize=queue_maxsize)
        self.metrics_interval_sec = metrics_interval_sec
        self.processed = 0

        self.start_time = time.time()
        self._tasks: List[asyncio.Task] = []

        log.info("오케스트레이터 초기화됨")

    async def start(self) -> None:
        """
        오케스트레이터를 시작합니다.

        수집이 끝나면 큐에 남은 스냅샷을 모두 처리한 뒤 반환합니다.
        """
        cons = asyncio.create_task(self._consumer())
        metrics_task = asyncio.create_task(self._update_metrics())
        self._tasks = [cons, metrics_task]

        log.info("오케스트레이터 시작됨")

        try:
            await self._producer()
            await self.q.join()
        finally:
            for task in self._tasks:
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks = []

        log.info(f"스냅샷 수집 종료 processed:{self.processed}")

    async def stop(self) -> None:
        """실행 중인 태스크를 취소하고 레이어를 정리합니다."""
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self.manager.destroy()
        log.info("오케스트레이터 중지됨")

    async def _producer(self) -> None:
        """스냅샷을 큐에 추가하는 프로듀서"""
        async for snapshot in self.ingest.recv():
            metrics.snapshots_received.inc()
            try:
                self.q.put_nowait(snapshot)
            except asyncio.QueueFull:
                # 전체 상태 스냅샷이므로 가장 오래된 것을 버림
                self.q.get_nowait()
                self.q.task_done()
                self.q.put_nowait(snapshot)
                metrics.snapshots_dropped.inc()
                log.warning("큐가 가득 찼습니다. 가장 오래된 스냅샷을 드롭합니다.")

    async def _consumer(self) -> None:
        """큐에서 스냅샷을 소비하는 컨슈머"""
        while True:
            snapshot = await self.q.get()
            try:
                self.process(snapshot)
            except Exception as e:
                log.error(f"스냅샷 처리 오류 error:{e}")
            finally:
                self.q.task_done()

    def process(self, snapshot: Snapshot) -> None:
        """스냅샷 하나로 조정 패스를 한 번 실행합니다."""
        states = select_incident_entities(snapshot, self.entity_prefix)
        self.manager.update_incidents(states)
        self.processed += 1

    async def _update_metrics(self) -> None:
        """주기적으로 메트릭을 업데이트합니다."""
        while True:
            metrics.uptime_seconds.set(time.time() - self.start_time)
            await asyncio.sleep(self.metrics_interval_sec)
