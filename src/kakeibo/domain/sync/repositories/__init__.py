"""Sync domain repository interfaces."""

from kakeibo.domain.sync.repositories.sync_history_repository import (
    SyncHistoryFilters,
    SyncHistoryRepository,
)
from kakeibo.domain.sync.repositories.sync_settings_repository import (
    SyncSettingsRepository,
)

__all__ = [
    "SyncHistoryFilters",
    "SyncHistoryRepository",
    "SyncSettingsRepository",
]
