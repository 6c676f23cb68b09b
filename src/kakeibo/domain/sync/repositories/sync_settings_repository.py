"""Repository interface for global and per-institution sync settings."""

from abc import ABC, abstractmethod
from typing import Optional

from kakeibo.domain.sync.entities import InstitutionSyncSettings, SyncSettings


class SyncSettingsRepository(ABC):
    """Repository for sync settings.

    Implementations keep a write-through cache: every save updates the cache
    before returning, so reads never observe a value older than the last
    local write.
    """

    @abstractmethod
    async def find(self) -> Optional[SyncSettings]:
        """Return the global settings, or None if never stored."""

    @abstractmethod
    async def get_or_create(self) -> SyncSettings:
        """Return the global settings, persisting defaults on first access."""

    @abstractmethod
    async def save(self, settings: SyncSettings) -> None:
        """Persist the global settings."""

    @abstractmethod
    async def find_institution_settings(
        self, institution_id: str
    ) -> Optional[InstitutionSyncSettings]:
        """Return the settings of one institution, if any."""

    @abstractmethod
    async def find_all_institution_settings(self) -> list[InstitutionSyncSettings]:
        """Return the settings of every institution."""

    @abstractmethod
    async def save_institution_settings(
        self, settings: InstitutionSyncSettings
    ) -> None:
        """Insert or replace the settings of one institution."""

    @abstractmethod
    async def delete_institution_settings(self, institution_id: str) -> bool:
        """
        Delete the settings of one institution.

        Returns
        -------
        True if settings existed and were deleted
        """
