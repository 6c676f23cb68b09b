"""Repository interface for sync run history."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from kakeibo.domain.sync.entities import SyncRun
from kakeibo.domain.sync.value_objects import SyncStatus


@dataclass(frozen=True)
class SyncHistoryFilters:
    """Optional filters for history listings. None means unfiltered."""

    institution_id: Optional[str] = None
    status: Optional[SyncStatus] = None
    started_from: Optional[datetime] = None
    started_to: Optional[datetime] = None
    batches_only: bool = False


class SyncHistoryRepository(ABC):
    """Repository interface for persisting and retrieving sync runs."""

    @abstractmethod
    async def create(self, run: SyncRun) -> None:
        """Persist a new sync run."""

    @abstractmethod
    async def update(self, run: SyncRun) -> None:
        """
        Persist the new state of an existing sync run.

        Raises
        ------
        SyncRunNotFoundError
            If the run was never created
        SyncRunAlreadyFinishedError
            If the stored run already reached a terminal status
        """

    @abstractmethod
    async def find_by_id(self, run_id: UUID) -> Optional[SyncRun]:
        """Find a sync run by ID."""

    @abstractmethod
    async def find_running(self) -> Optional[SyncRun]:
        """
        Return the batch run currently in RUNNING status, if any.

        This is the authoritative answer to "is a sync running".
        """

    @abstractmethod
    async def find_latest_successful(self, institution_id: str) -> Optional[SyncRun]:
        """Most recent COMPLETED run of one institution."""

    @abstractmethod
    async def find_with_filters(
        self,
        filters: SyncHistoryFilters,
        limit: int = 20,
        offset: int = 0,
    ) -> list[SyncRun]:
        """
        List runs matching the filters, newest first.

        Parameters
        ----------
        filters
            Filters to apply
        limit
            Maximum number of runs to return
        offset
            Number of runs to skip
        """

    @abstractmethod
    async def count_with_filters(self, filters: SyncHistoryFilters) -> int:
        """Count runs matching the filters."""
