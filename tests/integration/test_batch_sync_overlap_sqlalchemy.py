"""Integration tests for overlapping batch starts on the SQLAlchemy stores."""

import asyncio

import pytest

from kakeibo.application.commands.sync import BatchSyncCommand
from kakeibo.application.services import SyncOrchestrator
from kakeibo.domain.sync.exceptions import SyncAlreadyRunningError
from kakeibo.domain.sync.ports import TransactionConnectorRegistry
from kakeibo.domain.sync.repositories import SyncHistoryFilters
from kakeibo.infrastructure.integration import (
    InMemoryInstitutionDirectory,
    InMemoryTransactionStore,
)
from kakeibo.infrastructure.persistence.sqlalchemy.repositories import (
    SyncHistoryRepositorySQLAlchemy,
    SyncSettingsRepositorySQLAlchemy,
)
from tests.shared.fixtures import StubConnector, make_institution

pytestmark = pytest.mark.integration


@pytest.fixture
def history(session_maker):
    return SyncHistoryRepositorySQLAlchemy(session_maker)


@pytest.fixture
def settings_repo(session_maker):
    return SyncSettingsRepositorySQLAlchemy(session_maker)


@pytest.fixture
def command(history, settings_repo):
    connector = StubConnector(
        records={"inst-1": [{"id": "t1"}], "inst-2": [{"id": "t2"}]},
        delays={"inst-1": 0.2, "inst-2": 0.2},
    )
    orchestrator = SyncOrchestrator(
        history_repository=history,
        connectors=TransactionConnectorRegistry({"bank": connector}),
        ingest=InMemoryTransactionStore(),
        settings_repository=settings_repo,
    )
    directory = InMemoryInstitutionDirectory(
        [make_institution(1), make_institution(2)]
    )
    return BatchSyncCommand(directory, orchestrator, history, settings_repo)


class TestOverlappingBatchStarts:
    """Two starts racing each other must end up with a single batch."""

    @pytest.mark.asyncio
    async def test_only_one_of_two_simultaneous_starts_runs(self, command, history):
        outcomes = await asyncio.gather(
            command.execute(),
            command.execute(institution_ids=["inst-1"]),
            return_exceptions=True,
        )

        results = [o for o in outcomes if not isinstance(o, BaseException)]
        rejected = [o for o in outcomes if isinstance(o, SyncAlreadyRunningError)]
        assert len(results) == 1
        assert len(rejected) == 1
        assert rejected[0].details["run_id"] == str(results[0].run_id)

        batches = await history.find_with_filters(
            SyncHistoryFilters(batches_only=True), limit=10, offset=0
        )
        assert [run.id for run in batches] == [results[0].run_id]
        assert await history.find_running() is None

    @pytest.mark.asyncio
    async def test_next_start_runs_after_the_first_finished(self, command):
        first = await command.execute()
        second = await command.execute()

        assert first.run_id != second.run_id
        assert second.success_count == 2
