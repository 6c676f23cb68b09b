"""List and look up sync history."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from kakeibo.application.dtos.sync import SyncHistoryPage
from kakeibo.domain.shared.exceptions import ValidationError
from kakeibo.domain.sync.exceptions import SyncRunNotFoundError
from kakeibo.domain.sync.repositories import SyncHistoryFilters

if TYPE_CHECKING:
    from kakeibo.domain.sync.entities import SyncRun
    from kakeibo.domain.sync.repositories import SyncHistoryRepository
    from kakeibo.domain.sync.value_objects import SyncStatus

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class SyncHistoryQuery:
    """Paginated, filtered history, newest first."""

    def __init__(self, history_repository: SyncHistoryRepository):
        self._history = history_repository

    async def execute(  # NOQA: PLR0913
        self,
        institution_id: Optional[str] = None,
        status: Optional[SyncStatus] = None,
        started_from: Optional[datetime] = None,
        started_to: Optional[datetime] = None,
        batches_only: bool = False,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> SyncHistoryPage:
        if not 1 <= limit <= MAX_LIMIT:
            msg = f"limit must be between 1 and {MAX_LIMIT}, got {limit}"
            raise ValidationError(msg)
        if offset < 0:
            msg = f"offset must not be negative, got {offset}"
            raise ValidationError(msg)
        if started_from and started_to and started_from > started_to:
            msg = "started_from must not be after started_to"
            raise ValidationError(msg)

        filters = SyncHistoryFilters(
            institution_id=institution_id,
            status=status,
            started_from=started_from,
            started_to=started_to,
            batches_only=batches_only,
        )
        items = await self._history.find_with_filters(filters, limit=limit, offset=offset)
        total = await self._history.count_with_filters(filters)
        return SyncHistoryPage(items=items, total=total, limit=limit, offset=offset)


class GetSyncRunQuery:
    def __init__(self, history_repository: SyncHistoryRepository):
        self._history = history_repository

    async def execute(self, run_id: UUID) -> SyncRun:
        run = await self._history.find_by_id(run_id)
        if run is None:
            raise SyncRunNotFoundError(run_id)
        return run
