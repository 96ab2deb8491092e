"""Prometheus metrics for admission, lifecycle, queue and sweeper activity."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge

# Custom registry so tests and multiple app instances don't collide with the default one
REGISTRY = CollectorRegistry()

# Admission
uploads_admitted_total = Counter(
    "cleancut_uploads_admitted_total",
    "Uploads accepted and enqueued",
    ["plan", "kind"],
    registry=REGISTRY,
)

uploads_rejected_total = Counter(
    "cleancut_uploads_rejected_total",
    "Uploads rejected before admission",
    ["reason"],
    registry=REGISTRY,
)

# Lifecycle
project_transitions_total = Counter(
    "cleancut_project_transitions_total",
    "Applied project status transitions",
    ["to_status"],
    registry=REGISTRY,
)

project_transitions_rejected_total = Counter(
    "cleancut_project_transitions_rejected_total",
    "Attempted project transitions that were not permitted",
    ["target_status"],
    registry=REGISTRY,
)

progress_updates_rejected_total = Counter(
    "cleancut_progress_updates_rejected_total",
    "Progress reports ignored as stale, out of order or out of range",
    registry=REGISTRY,
)

# Queue
queue_claims_total = Counter(
    "cleancut_queue_claims_total",
    "Queue entries handed to a worker",
    ["priority"],
    registry=REGISTRY,
)

queue_retries_total = Counter(
    "cleancut_queue_retries_total",
    "Worker failures scheduled for another attempt",
    registry=REGISTRY,
)

queue_dead_total = Counter(
    "cleancut_queue_dead_total",
    "Queue entries that exhausted their attempts",
    registry=REGISTRY,
)

queue_depth = Gauge(
    "cleancut_queue_depth",
    "Queue entries by state at last inspection",
    ["state"],
    registry=REGISTRY,
)

# Sweeper
sweep_deleted_total = Counter(
    "cleancut_sweep_deleted_total",
    "Expired projects deleted by the sweeper",
    registry=REGISTRY,
)

sweep_failures_total = Counter(
    "cleancut_sweep_failures_total",
    "Expired projects the sweeper failed to delete",
    registry=REGISTRY,
)

# Storage
storage_delete_failures_total = Counter(
    "cleancut_storage_delete_failures_total",
    "Asset deletions that failed (possible orphaned files)",
    ["operation"],
    registry=REGISTRY,
)

monthly_resets_total = Counter(
    "cleancut_monthly_resets_total",
    "Accounts whose monthly counter was reset",
    registry=REGISTRY,
)

# Application
application_info = Gauge(
    "cleancut_application_info",
    "Application build information",
    ["version", "service", "environment"],
    registry=REGISTRY,
)
