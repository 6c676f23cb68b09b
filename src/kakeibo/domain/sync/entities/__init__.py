"""Sync domain entities."""

from kakeibo.domain.sync.entities.institution_sync_settings import (
    InstitutionSyncSettings,
)
from kakeibo.domain.sync.entities.sync_run import SyncRun
from kakeibo.domain.sync.entities.sync_settings import SyncSettings

__all__ = [
    "InstitutionSyncSettings",
    "SyncRun",
    "SyncSettings",
]
