"""Remove the sync settings of an institution that was disconnected."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from kakeibo.application.services import SyncScheduler
    from kakeibo.domain.sync.repositories import SyncSettingsRepository


class DeleteInstitutionSyncSettingsCommand:
    def __init__(
        self,
        settings_repository: SyncSettingsRepository,
        scheduler: Optional[SyncScheduler] = None,
    ):
        self._settings_repo = settings_repository
        self._scheduler = scheduler

    async def execute(self, institution_id: str) -> bool:
        if self._scheduler is not None:
            self._scheduler.remove_institution_schedule(institution_id)
        return await self._settings_repo.delete_institution_settings(institution_id)
