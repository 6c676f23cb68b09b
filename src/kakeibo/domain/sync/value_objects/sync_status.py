"""Sync run and institution sync status enumerations."""

from enum import Enum


class SyncStatus(Enum):
    """Lifecycle status of a sync run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL_SUCCESS = "partial_success"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        return self in [
            SyncStatus.COMPLETED,
            SyncStatus.FAILED,
            SyncStatus.PARTIAL_SUCCESS,
            SyncStatus.CANCELLED,
        ]

    def is_success(self) -> bool:
        return self in [SyncStatus.COMPLETED, SyncStatus.PARTIAL_SUCCESS]


class InstitutionSyncStatus(Enum):
    """Coarse sync state shown per institution."""

    IDLE = "idle"
    SYNCING = "syncing"
    ERROR = "error"
