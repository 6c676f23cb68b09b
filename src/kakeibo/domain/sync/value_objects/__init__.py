"""Sync domain value objects."""

from kakeibo.domain.sync.value_objects.cron_expression import CronExpression
from kakeibo.domain.sync.value_objects.quiet_hours import QuietHours
from kakeibo.domain.sync.value_objects.sync_interval import (
    MAX_INTERVAL_MINUTES,
    MIN_INTERVAL_MINUTES,
    SyncInterval,
    SyncIntervalType,
    TimeUnit,
)
from kakeibo.domain.sync.value_objects.sync_status import (
    InstitutionSyncStatus,
    SyncStatus,
)

__all__ = [
    "MAX_INTERVAL_MINUTES",
    "MIN_INTERVAL_MINUTES",
    "CronExpression",
    "InstitutionSyncStatus",
    "QuietHours",
    "SyncInterval",
    "SyncIntervalType",
    "SyncStatus",
    "TimeUnit",
]
