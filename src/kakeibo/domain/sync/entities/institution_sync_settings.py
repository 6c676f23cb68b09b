"""Per-institution sync settings entity."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from kakeibo.domain.shared.time import utc_now
from kakeibo.domain.sync.value_objects import InstitutionSyncStatus, SyncInterval


@dataclass(frozen=True)
class InstitutionSyncSettings:
    """Sync schedule and health of one connected institution.

    ``interval`` is None while the institution follows the global default.
    Methods that can move ``next_sync_at`` take the current global default
    so the effective interval can be resolved.
    """

    institution_id: str
    id: UUID = field(default_factory=uuid4)
    interval: Optional[SyncInterval] = None
    enabled: bool = True
    last_synced_at: Optional[datetime] = None
    next_sync_at: Optional[datetime] = None
    sync_status: InstitutionSyncStatus = InstitutionSyncStatus.IDLE
    error_count: int = 0
    last_error: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(
        cls,
        institution_id: str,
        default_interval: SyncInterval,
        interval: Optional[SyncInterval] = None,
        enabled: bool = True,
    ) -> "InstitutionSyncSettings":
        settings = cls(institution_id=institution_id, interval=interval, enabled=enabled)
        return replace(
            settings, next_sync_at=settings._compute_next(default_interval)
        )

    @property
    def inherits_default(self) -> bool:
        return self.interval is None

    def effective_interval(self, default_interval: SyncInterval) -> SyncInterval:
        return self.interval if self.interval is not None else default_interval

    def update_interval(
        self,
        interval: Optional[SyncInterval],
        default_interval: SyncInterval,
    ) -> "InstitutionSyncSettings":
        """Set an explicit interval, or pass None to follow the default again."""
        return self._touch(default_interval, interval=interval)

    def apply_default_interval(
        self, default_interval: SyncInterval
    ) -> "InstitutionSyncSettings":
        """Recompute the schedule after the global default changed."""
        return self._touch(default_interval)

    def set_enabled(
        self, enabled: bool, default_interval: SyncInterval
    ) -> "InstitutionSyncSettings":
        return self._touch(default_interval, enabled=enabled)

    def mark_syncing(self) -> "InstitutionSyncSettings":
        return replace(
            self, sync_status=InstitutionSyncStatus.SYNCING, updated_at=utc_now()
        )

    def mark_idle(self) -> "InstitutionSyncSettings":
        return replace(
            self, sync_status=InstitutionSyncStatus.IDLE, updated_at=utc_now()
        )

    def increment_error_count(
        self, error: Optional[str] = None
    ) -> "InstitutionSyncSettings":
        return replace(
            self,
            error_count=self.error_count + 1,
            last_error=error if error is not None else self.last_error,
            sync_status=InstitutionSyncStatus.ERROR,
            updated_at=utc_now(),
        )

    def reset_error_count(
        self, default_interval: SyncInterval
    ) -> "InstitutionSyncSettings":
        return self._touch(
            default_interval,
            error_count=0,
            last_error=None,
            sync_status=InstitutionSyncStatus.IDLE,
        )

    def record_successful_sync(
        self,
        synced_at: datetime,
        default_interval: SyncInterval,
    ) -> "InstitutionSyncSettings":
        return self._touch(
            default_interval,
            last_synced_at=synced_at,
            error_count=0,
            last_error=None,
            sync_status=InstitutionSyncStatus.IDLE,
        )

    def _touch(self, default_interval: SyncInterval, **changes) -> "InstitutionSyncSettings":
        updated = replace(self, **changes, updated_at=utc_now())
        return replace(updated, next_sync_at=updated._compute_next(default_interval))

    def _compute_next(self, default_interval: SyncInterval) -> Optional[datetime]:
        interval = self.effective_interval(default_interval)
        if not self.enabled or interval.is_manual:
            return None
        return interval.next_run_after(self.last_synced_at)
