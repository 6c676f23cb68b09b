"""Cancel a running sync."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from kakeibo.application.dtos.sync import CancelSyncResult
from kakeibo.domain.sync.exceptions import (
    InvalidSyncTransitionError,
    SyncRunAlreadyFinishedError,
    SyncRunNotFoundError,
)

if TYPE_CHECKING:
    from kakeibo.application.services import SyncOrchestrator
    from kakeibo.domain.sync.repositories import SyncHistoryRepository

logger = logging.getLogger(__name__)


class CancelSyncCommand:
    """Mark a run cancelled, then signal the orchestrator.

    An invalid transition is reported in the result rather than raised.
    """

    def __init__(
        self,
        history_repository: SyncHistoryRepository,
        orchestrator: SyncOrchestrator,
    ):
        self._history = history_repository
        self._orchestrator = orchestrator

    async def execute(self, run_id: UUID) -> CancelSyncResult:
        run = await self._history.find_by_id(run_id)
        if run is None:
            raise SyncRunNotFoundError(run_id)

        try:
            cancelled = run.cancel()
        except InvalidSyncTransitionError:
            return _rejected(run.status.value)

        try:
            await self._history.update(cancelled)
        except SyncRunAlreadyFinishedError as e:
            return _rejected(e.status)

        signalled = self._orchestrator.cancel(run_id)
        logger.info("Sync run %s cancelled (live token: %s)", run_id, signalled)
        return CancelSyncResult(success=True, message="Sync cancelled successfully")


def _rejected(status: str) -> CancelSyncResult:
    return CancelSyncResult(
        success=False,
        message=f"Cannot cancel sync: status is {status}",
    )
