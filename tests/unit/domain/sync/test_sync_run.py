"""Unit tests for the SyncRun entity state machine."""

import pytest

from kakeibo.domain.sync.entities import SyncRun
from kakeibo.domain.sync.exceptions import InvalidSyncTransitionError
from kakeibo.domain.sync.value_objects import SyncStatus


@pytest.fixture
def leg():
    return SyncRun.create_leg("inst-1", "Institution 1", "bank")


class TestSyncRunCreate:
    def test_create_batch(self):
        run = SyncRun.create_batch(total_institutions=7)

        assert run.is_batch
        assert run.institution_id is None
        assert run.total_institutions == 7
        assert run.status == SyncStatus.PENDING

    def test_create_leg(self, leg):
        assert not leg.is_batch
        assert leg.institution_id == "inst-1"
        assert leg.total_institutions == 1
        assert leg.completed_at is None
        assert leg.duration is None


class TestSyncRunTransitions:
    """Tests for forward-only state transitions."""

    def test_start(self, leg):
        running = leg.start()

        assert running.status == SyncStatus.RUNNING
        assert running.is_running
        assert leg.status == SyncStatus.PENDING

    @pytest.mark.parametrize(
        ("success", "failure", "status"),
        [
            (3, 0, SyncStatus.COMPLETED),
            (0, 0, SyncStatus.COMPLETED),
            (2, 1, SyncStatus.PARTIAL_SUCCESS),
            (0, 3, SyncStatus.FAILED),
        ],
    )
    def test_complete_derives_status(self, success, failure, status):
        run = SyncRun.create_batch(3).start().complete(success, failure)

        assert run.status == status
        assert run.success_count == success
        assert run.failure_count == failure
        assert run.completed_at is not None

    def test_fail_records_message(self, leg):
        failed = leg.start().fail("Fetch timeout after 120s")

        assert failed.status == SyncStatus.FAILED
        assert failed.error_message == "Fetch timeout after 120s"
        assert failed.is_terminal

    def test_cancel(self, leg):
        cancelled = leg.start().cancel()

        assert cancelled.status == SyncStatus.CANCELLED
        assert cancelled.completed_at is not None

    def test_cannot_start_twice(self, leg):
        with pytest.raises(InvalidSyncTransitionError, match="Cannot start"):
            leg.start().start()

    def test_cannot_finish_pending_run(self, leg):
        with pytest.raises(InvalidSyncTransitionError):
            leg.complete(1, 0)
        with pytest.raises(InvalidSyncTransitionError):
            leg.cancel()

    @pytest.mark.parametrize("action", ["complete", "fail", "cancel"])
    def test_terminal_run_rejects_transitions(self, leg, action):
        done = leg.start().complete(1, 0)

        with pytest.raises(InvalidSyncTransitionError) as exc_info:
            if action == "complete":
                done.complete(1, 0)
            elif action == "fail":
                done.fail("late")
            else:
                done.cancel()

        assert exc_info.value.current == "completed"
        assert str(exc_info.value) == f"Cannot {action} sync run in status completed"

    def test_duration(self, leg):
        done = leg.start().complete(1, 0)

        assert done.duration is not None
        assert done.duration.total_seconds() >= 0


class TestSyncRunCounters:
    """Tests for counters while the run is open."""

    def test_record_fetch_accumulates(self, leg):
        run = leg.start().record_fetch(total=10, new=7, duplicate=3)
        run = run.record_fetch(total=2, new=2, duplicate=0)

        assert (run.total_fetched, run.new_records, run.duplicate_records) == (12, 9, 3)

    def test_add_new_transactions(self, leg):
        assert leg.start().add_new_transactions(4).new_records == 4

    def test_increment_retry_count(self, leg):
        run = leg.start().increment_retry_count().increment_retry_count()

        assert run.retry_count == 2

    def test_counters_rejected_after_finish(self, leg):
        done = leg.start().fail("boom")

        with pytest.raises(InvalidSyncTransitionError):
            done.increment_retry_count()
        with pytest.raises(InvalidSyncTransitionError):
            done.record_fetch(total=1, new=1, duplicate=0)
