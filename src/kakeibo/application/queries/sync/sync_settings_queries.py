"""Read global and per-institution sync settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kakeibo.domain.sync.entities import InstitutionSyncSettings
from kakeibo.domain.sync.exceptions import InstitutionNotFoundError

if TYPE_CHECKING:
    from kakeibo.domain.sync.entities import SyncSettings
    from kakeibo.domain.sync.ports import InstitutionDirectory
    from kakeibo.domain.sync.repositories import SyncSettingsRepository


class GetSyncSettingsQuery:
    """Global settings; defaults are stored on first access."""

    def __init__(self, settings_repository: SyncSettingsRepository):
        self._settings_repo = settings_repository

    async def execute(self) -> SyncSettings:
        return await self._settings_repo.get_or_create()


class GetInstitutionSyncSettingsQuery:
    """Settings of one institution, created from the default on first access."""

    def __init__(
        self,
        settings_repository: SyncSettingsRepository,
        directory: InstitutionDirectory,
    ):
        self._settings_repo = settings_repository
        self._directory = directory

    async def execute(self, institution_id: str) -> InstitutionSyncSettings:
        existing = await self._settings_repo.find_institution_settings(institution_id)
        if existing is not None:
            return existing

        if await self._directory.find_by_id(institution_id) is None:
            raise InstitutionNotFoundError(institution_id)

        global_settings = await self._settings_repo.get_or_create()
        created = InstitutionSyncSettings.create(
            institution_id, global_settings.default_interval
        )
        await self._settings_repo.save_institution_settings(created)
        return created


class ListInstitutionSyncSettingsQuery:
    def __init__(self, settings_repository: SyncSettingsRepository):
        self._settings_repo = settings_repository

    async def execute(self) -> list[InstitutionSyncSettings]:
        return await self._settings_repo.find_all_institution_settings()
