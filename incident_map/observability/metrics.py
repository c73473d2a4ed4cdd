"""
Metrics definitions for the incident map engine.

This module defines Prometheus metrics for monitoring
reconciliation passes, layer churn and geometry transitions.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
reconcile_passes = Counter(
    "reconcile_passes_total",
    "Number of reconciliation passes over the incident set"
)

layers_created = Counter(
    "layers_created_total",
    "Number of incident layers added to the map surface"
)

layers_removed = Counter(
    "layers_removed_total",
    "Number of incident layers removed from the map surface"
)

layer_failures = Counter(
    "layer_failures_total",
    "Number of incidents skipped because the map surface raised"
)

transitions_started = Counter(
    "transitions_started_total",
    "Number of geometry transitions started"
)

transitions_cancelled = Counter(
    "transitions_cancelled_total",
    "Number of geometry transitions cancelled before completion"
)

transitions_completed = Counter(
    "transitions_completed_total",
    "Number of geometry transitions that reached their target"
)

extent_cache_lookups = Counter(
    "extent_cache_lookups_total",
    "Extent cache lookups by result",
    ["result"]
)

snapshots_received = Counter(
    "snapshots_received_total",
    "Number of entity state snapshots received"
)

snapshots_dropped = Counter(
    "snapshots_dropped_total",
    "Number of snapshots dropped because the queue was full"
)

# 히스토그램 메트릭
reconcile_seconds = Histogram(
    "reconcile_duration_seconds",
    "Time spent in one reconciliation pass",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5]
)

# 게이지 메트릭
incident_layers = Gauge(
    "incident_layers",
    "Current number of incident layers on the map"
)

incidents_tracked = Gauge(
    "incidents_tracked",
    "Current number of tracked incidents (with or without geometry)"
)

active_transitions = Gauge(
    "active_transitions",
    "Current number of running geometry transitions"
)

uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
