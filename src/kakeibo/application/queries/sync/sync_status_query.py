"""Report whether a batch sync is running and how far it got."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kakeibo.application.dtos.sync import SyncStatusResult

if TYPE_CHECKING:
    from kakeibo.application.services import SyncOrchestrator
    from kakeibo.domain.sync.repositories import SyncHistoryRepository


class SyncStatusQuery:
    def __init__(
        self,
        history_repository: SyncHistoryRepository,
        orchestrator: SyncOrchestrator,
    ):
        self._history = history_repository
        self._orchestrator = orchestrator

    async def execute(self) -> SyncStatusResult:
        running = await self._history.find_running()
        if running is None:
            return SyncStatusResult(is_running=False)
        return SyncStatusResult(
            is_running=True,
            run_id=running.id,
            started_at=running.started_at,
            progress=self._orchestrator.progress(running.id),
        )
