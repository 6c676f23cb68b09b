"""Update the sync settings of one institution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from kakeibo.domain.sync.entities import InstitutionSyncSettings
from kakeibo.domain.sync.exceptions import InstitutionNotFoundError

if TYPE_CHECKING:
    from kakeibo.application.services import SyncScheduler
    from kakeibo.domain.sync.ports import InstitutionDirectory
    from kakeibo.domain.sync.repositories import SyncSettingsRepository
    from kakeibo.domain.sync.value_objects import SyncInterval


class UpdateInstitutionSyncSettingsCommand:
    """Change interval or enabled flag of one institution and reschedule it."""

    def __init__(
        self,
        settings_repository: SyncSettingsRepository,
        directory: InstitutionDirectory,
        scheduler: Optional[SyncScheduler] = None,
    ):
        self._settings_repo = settings_repository
        self._directory = directory
        self._scheduler = scheduler

    async def execute(
        self,
        institution_id: str,
        interval: Optional[SyncInterval] = None,
        enabled: Optional[bool] = None,
        use_default_interval: bool = False,
    ) -> InstitutionSyncSettings:
        """
        Apply a partial update.

        Parameters
        ----------
        institution_id
            Institution to update
        interval
            New explicit interval, None leaves it unchanged
        enabled
            New enabled flag, None leaves it unchanged
        use_default_interval
            Drop the explicit interval and follow the global default again
        """
        if await self._directory.find_by_id(institution_id) is None:
            raise InstitutionNotFoundError(institution_id)

        global_settings = await self._settings_repo.get_or_create()
        default = global_settings.default_interval

        current = await self._settings_repo.find_institution_settings(institution_id)
        if current is None:
            current = InstitutionSyncSettings.create(institution_id, default)

        updated = current
        if use_default_interval:
            updated = updated.update_interval(None, default)
        elif interval is not None:
            updated = updated.update_interval(interval, default)
        if enabled is not None:
            updated = updated.set_enabled(enabled, default)

        await self._settings_repo.save_institution_settings(updated)
        if self._scheduler is not None:
            self._scheduler.apply_institution_schedule(institution_id, updated, default)
        return updated
