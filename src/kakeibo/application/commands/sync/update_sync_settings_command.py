"""Update the global sync settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from kakeibo.domain.sync.entities import SyncSettings

if TYPE_CHECKING:
    from kakeibo.application.services import SyncScheduler
    from kakeibo.domain.sync.repositories import SyncSettingsRepository
    from kakeibo.domain.sync.value_objects import SyncInterval

logger = logging.getLogger(__name__)


class UpdateSyncSettingsCommand:
    """Partially update global settings and reschedule.

    When the default interval changes, institutions following the default
    get their next sync time recomputed.
    """

    def __init__(
        self,
        settings_repository: SyncSettingsRepository,
        scheduler: Optional[SyncScheduler] = None,
    ):
        self._settings_repo = settings_repository
        self._scheduler = scheduler

    async def execute(  # NOQA: PLR0913
        self,
        default_interval: Optional[SyncInterval] = None,
        wifi_only: Optional[bool] = None,
        battery_saving_mode: Optional[bool] = None,
        auto_retry: Optional[bool] = None,
        max_retry_count: Optional[int] = None,
        quiet_hours_enabled: Optional[bool] = None,
        quiet_hours_start: Optional[str] = None,
        quiet_hours_end: Optional[str] = None,
    ) -> SyncSettings:
        current = await self._settings_repo.get_or_create()

        updated = current.update_options(
            wifi_only=wifi_only,
            battery_saving_mode=battery_saving_mode,
            auto_retry=auto_retry,
            max_retry_count=max_retry_count,
            quiet_hours_enabled=quiet_hours_enabled,
            quiet_hours_start=quiet_hours_start,
            quiet_hours_end=quiet_hours_end,
        )
        interval_changed = (
            default_interval is not None
            and default_interval != current.default_interval
        )
        if interval_changed:
            updated = updated.update_default_interval(default_interval)

        await self._settings_repo.save(updated)

        if interval_changed:
            await self._recompute_inheriting(updated)
            logger.info(
                "Default sync interval changed from %s to %s",
                current.default_interval,
                updated.default_interval,
            )

        if self._scheduler is not None:
            self._scheduler.apply_global_schedule(updated)
        return updated

    async def _recompute_inheriting(self, settings: SyncSettings) -> None:
        for institution in await self._settings_repo.find_all_institution_settings():
            if institution.inherits_default:
                await self._settings_repo.save_institution_settings(
                    institution.apply_default_interval(settings.default_interval),
                )
