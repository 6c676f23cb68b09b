"""Sync DTOs."""

from kakeibo.application.dtos.sync.batch_sync_result import (
    BatchSyncResult,
    LegResult,
)
from kakeibo.application.dtos.sync.cancel_sync_result import CancelSyncResult
from kakeibo.application.dtos.sync.sync_history_page import SyncHistoryPage
from kakeibo.application.dtos.sync.sync_status_result import (
    SyncProgress,
    SyncStatusResult,
)
from kakeibo.application.dtos.sync.sync_target import SyncTarget

__all__ = [
    "BatchSyncResult",
    "CancelSyncResult",
    "LegResult",
    "SyncHistoryPage",
    "SyncProgress",
    "SyncStatusResult",
    "SyncTarget",
]
