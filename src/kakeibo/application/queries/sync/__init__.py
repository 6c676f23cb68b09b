"""Sync queries."""

from kakeibo.application.queries.sync.sync_history_query import (
    GetSyncRunQuery,
    SyncHistoryQuery,
)
from kakeibo.application.queries.sync.sync_settings_queries import (
    GetInstitutionSyncSettingsQuery,
    GetSyncSettingsQuery,
    ListInstitutionSyncSettingsQuery,
)
from kakeibo.application.queries.sync.sync_status_query import SyncStatusQuery

__all__ = [
    "GetInstitutionSyncSettingsQuery",
    "GetSyncRunQuery",
    "GetSyncSettingsQuery",
    "ListInstitutionSyncSettingsQuery",
    "SyncHistoryQuery",
    "SyncStatusQuery",
]
