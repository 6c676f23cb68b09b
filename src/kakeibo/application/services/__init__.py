"""Application services."""

from kakeibo.application.services.sync_orchestrator import (
    CancellationToken,
    SyncOrchestrator,
)
from kakeibo.application.services.sync_scheduler import (
    GLOBAL_SCHEDULE_KEY,
    SchedulerMetrics,
    SyncScheduler,
)

__all__ = [
    "GLOBAL_SCHEDULE_KEY",
    "CancellationToken",
    "SchedulerMetrics",
    "SyncOrchestrator",
    "SyncScheduler",
]
