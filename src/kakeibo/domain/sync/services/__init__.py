"""Sync domain services."""

from kakeibo.domain.sync.services.incremental_sync_strategy import (
    DEFAULT_MAX_PERIOD_DAYS,
    FULL_SYNC_LOOKBACK,
    INCREMENTAL_OVERLAP,
    MAX_PERIOD,
    DuplicateFilterResult,
    DuplicateFilterStats,
    IncrementalSyncStrategy,
    OptimizedPeriod,
    PeriodValidation,
    record_identifier,
)

__all__ = [
    "DEFAULT_MAX_PERIOD_DAYS",
    "FULL_SYNC_LOOKBACK",
    "INCREMENTAL_OVERLAP",
    "MAX_PERIOD",
    "DuplicateFilterResult",
    "DuplicateFilterStats",
    "IncrementalSyncStrategy",
    "OptimizedPeriod",
    "PeriodValidation",
    "record_identifier",
]
