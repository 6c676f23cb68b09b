"""Integration tests for SyncHistoryRepositorySQLAlchemy."""

from dataclasses import replace
from datetime import timedelta
from uuid import uuid4

import pytest

from kakeibo.domain.sync.entities import SyncRun
from kakeibo.domain.sync.exceptions import (
    SyncRunAlreadyFinishedError,
    SyncRunNotFoundError,
)
from kakeibo.domain.sync.repositories import SyncHistoryFilters
from kakeibo.domain.sync.value_objects import SyncStatus
from kakeibo.infrastructure.persistence.sqlalchemy.repositories import (
    SyncHistoryRepositorySQLAlchemy,
)

pytestmark = pytest.mark.integration


@pytest.fixture
def repository(session_maker):
    return SyncHistoryRepositorySQLAlchemy(session_maker)


def _leg(institution_id: str = "inst-1") -> SyncRun:
    return SyncRun.create_leg(institution_id, f"Name {institution_id}", "bank")


class TestSyncHistoryRepositoryWrites:
    """Tests for creating and updating runs."""

    @pytest.mark.asyncio
    async def test_create_and_find(self, repository):
        run = _leg().start()

        await repository.create(run)
        found = await repository.find_by_id(run.id)

        assert found.id == run.id
        assert found.status == SyncStatus.RUNNING
        assert found.institution_id == "inst-1"
        assert found.started_at == run.started_at
        assert found.started_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_update_persists_counters(self, repository):
        run = _leg().start()
        await repository.create(run)

        done = run.increment_retry_count().record_fetch(5, 3, 2).complete(1, 0)
        await repository.update(done)
        found = await repository.find_by_id(run.id)

        assert found.status == SyncStatus.COMPLETED
        assert (found.total_fetched, found.new_records, found.duplicate_records) == (
            5,
            3,
            2,
        )
        assert found.retry_count == 1
        assert found.completed_at == done.completed_at

    @pytest.mark.asyncio
    async def test_terminal_run_refuses_updates(self, repository):
        """Test that the first terminal state written wins."""
        run = _leg().start()
        await repository.create(run)
        await repository.update(run.cancel())

        with pytest.raises(SyncRunAlreadyFinishedError) as exc_info:
            await repository.update(run.complete(1, 0))

        assert exc_info.value.status == "cancelled"
        assert (await repository.find_by_id(run.id)).status == SyncStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_update_unknown_run(self, repository):
        with pytest.raises(SyncRunNotFoundError):
            await repository.update(_leg().start())

    @pytest.mark.asyncio
    async def test_find_missing(self, repository):
        assert await repository.find_by_id(uuid4()) is None


class TestSyncHistoryRepositoryQueries:
    """Tests for running, latest-success and filtered lookups."""

    @pytest.mark.asyncio
    async def test_find_running_only_returns_batches(self, repository):
        await repository.create(_leg().start())
        assert await repository.find_running() is None

        batch = SyncRun.create_batch(2).start()
        await repository.create(batch)

        assert (await repository.find_running()).id == batch.id

    @pytest.mark.asyncio
    async def test_find_latest_successful(self, repository):
        older = _leg().start().complete(1, 0)
        newer = replace(
            _leg().start().complete(1, 0),
            completed_at=older.completed_at + timedelta(hours=6),
        )
        failed = _leg().start().fail("boom")
        for run in (older, newer, failed):
            await repository.create(run)

        latest = await repository.find_latest_successful("inst-1")

        assert latest.id == newer.id
        assert await repository.find_latest_successful("inst-2") is None

    @pytest.mark.asyncio
    async def test_filters_and_pagination(self, repository):
        base = _leg().start().started_at
        runs = [
            replace(_leg(i).start(), started_at=base + timedelta(minutes=n))
            for n, i in enumerate(["inst-1", "inst-2", "inst-1"])
        ]
        batch = replace(
            SyncRun.create_batch(3).start(), started_at=base + timedelta(minutes=5)
        ).complete(3, 0)
        for run in [*runs, batch]:
            await repository.create(run)

        everything = await repository.find_with_filters(SyncHistoryFilters())
        inst_1 = SyncHistoryFilters(institution_id="inst-1")
        page = await repository.find_with_filters(inst_1, limit=1, offset=1)

        assert [r.id for r in everything] == [batch.id, runs[2].id, runs[1].id, runs[0].id]
        assert await repository.count_with_filters(inst_1) == 2
        assert [r.id for r in page] == [runs[0].id]
        assert await repository.count_with_filters(
            SyncHistoryFilters(batches_only=True)
        ) == 1
        assert await repository.count_with_filters(
            SyncHistoryFilters(status=SyncStatus.COMPLETED)
        ) == 1

    @pytest.mark.asyncio
    async def test_date_range_filter(self, repository):
        run = _leg().start()
        await repository.create(run)

        inside = SyncHistoryFilters(
            started_from=run.started_at - timedelta(minutes=1),
            started_to=run.started_at + timedelta(minutes=1),
        )
        after = SyncHistoryFilters(started_from=run.started_at + timedelta(minutes=1))

        assert await repository.count_with_filters(inside) == 1
        assert await repository.count_with_filters(after) == 0
