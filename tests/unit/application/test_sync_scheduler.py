"""Unit tests for the SyncScheduler."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from kakeibo.application.dtos.sync import BatchSyncResult
from kakeibo.application.services import (
    GLOBAL_SCHEDULE_KEY,
    SchedulerMetrics,
    SyncScheduler,
)
from kakeibo.domain.shared.time import utc_now
from kakeibo.domain.sync.entities import InstitutionSyncSettings, SyncRun, SyncSettings
from kakeibo.domain.sync.exceptions import SyncAlreadyRunningError
from kakeibo.domain.sync.value_objects import (
    QuietHours,
    SyncInterval,
    SyncStatus,
    TimeUnit,
)
from tests.shared.fixtures import FakeTriggerRegistry

TIMEZONE = "Asia/Tokyo"
DEFAULT = SyncInterval.standard()


def _result(status: SyncStatus) -> BatchSyncResult:
    now = utc_now()
    return BatchSyncResult(started_at=now, status=status, completed_at=now)


@pytest.fixture
def registry():
    return FakeTriggerRegistry()


@pytest.fixture
def sync_command():
    command = AsyncMock()
    command.execute.return_value = _result(SyncStatus.COMPLETED)
    return command


@pytest.fixture
def scheduler(registry, sync_command, history, settings_repo):
    return SyncScheduler(
        registry=registry,
        sync_command=sync_command,
        history_repository=history,
        settings_repository=settings_repo,
        timezone=TIMEZONE,
    )


class TestGlobalSchedule:
    """Tests for the global trigger."""

    def test_registers_default_interval(self, scheduler, registry):
        expression = scheduler.apply_global_schedule(SyncSettings.create_default())

        assert expression == "0 */6 * * *"
        trigger = registry.triggers[GLOBAL_SCHEDULE_KEY]
        assert trigger.expression == "0 */6 * * *"
        assert trigger.timezone == TIMEZONE
        assert scheduler.current_schedules() == {GLOBAL_SCHEDULE_KEY: "0 */6 * * *"}

    def test_replacement_cancels_before_registering(self, scheduler, registry):
        """Test that a key never has two live triggers."""
        settings = SyncSettings.create_default()
        scheduler.apply_global_schedule(settings)
        registry.calls.clear()

        scheduler.apply_global_schedule(
            settings.update_default_interval(SyncInterval.frequent())
        )

        assert registry.calls == [
            ("cancel", GLOBAL_SCHEDULE_KEY),
            ("register", GLOBAL_SCHEDULE_KEY),
        ]
        assert registry.triggers[GLOBAL_SCHEDULE_KEY].expression == "0 */1 * * *"

    def test_manual_default_removes_trigger(self, scheduler, registry):
        settings = SyncSettings.create_default()
        scheduler.apply_global_schedule(settings)

        expression = scheduler.apply_global_schedule(
            settings.update_default_interval(SyncInterval.manual())
        )

        assert expression is None
        assert GLOBAL_SCHEDULE_KEY not in registry.triggers
        assert scheduler.current_schedules() == {}


class TestInstitutionSchedule:
    """Tests for per-institution triggers."""

    def test_inheriting_institution_has_no_own_trigger(self, scheduler, registry):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        assert scheduler.apply_institution_schedule("inst-1", settings, DEFAULT) is None
        assert "inst-1" not in registry.triggers

    def test_explicit_interval_registers_trigger(self, scheduler, registry):
        settings = InstitutionSyncSettings.create(
            "inst-1", DEFAULT, interval=SyncInterval.custom(30, TimeUnit.MINUTES)
        )

        expression = scheduler.apply_institution_schedule("inst-1", settings, DEFAULT)

        assert expression == "*/30 * * * *"
        assert registry.triggers["inst-1"].expression == "*/30 * * * *"

    def test_disabling_removes_trigger(self, scheduler, registry):
        settings = InstitutionSyncSettings.create(
            "inst-1", DEFAULT, interval=SyncInterval.frequent()
        )
        scheduler.apply_institution_schedule("inst-1", settings, DEFAULT)

        scheduler.apply_institution_schedule(
            "inst-1", settings.set_enabled(False, DEFAULT), DEFAULT
        )

        assert "inst-1" not in registry.triggers

    def test_manual_interval_removes_trigger(self, scheduler, registry):
        settings = InstitutionSyncSettings.create(
            "inst-1", DEFAULT, interval=SyncInterval.frequent()
        )
        scheduler.apply_institution_schedule("inst-1", settings, DEFAULT)

        scheduler.apply_institution_schedule(
            "inst-1", settings.update_interval(SyncInterval.manual(), DEFAULT), DEFAULT
        )

        assert "inst-1" not in registry.triggers

    def test_remove_institution_schedule(self, scheduler, registry):
        settings = InstitutionSyncSettings.create(
            "inst-1", DEFAULT, interval=SyncInterval.frequent()
        )
        scheduler.apply_institution_schedule("inst-1", settings, DEFAULT)

        assert scheduler.remove_institution_schedule("inst-1") is True
        assert scheduler.remove_institution_schedule("inst-1") is False
        assert registry.triggers == {}

    @pytest.mark.asyncio
    async def test_bootstrap_registers_stored_settings(
        self, scheduler, registry, settings_repo
    ):
        await settings_repo.save_institution_settings(
            InstitutionSyncSettings.create(
                "inst-1", DEFAULT, interval=SyncInterval.frequent()
            )
        )
        await settings_repo.save_institution_settings(
            InstitutionSyncSettings.create("inst-2", DEFAULT)
        )

        await scheduler.bootstrap()

        assert scheduler.current_schedules() == {
            GLOBAL_SCHEDULE_KEY: "0 */6 * * *",
            "inst-1": "0 */1 * * *",
        }

    def test_shutdown_cancels_everything(self, scheduler, registry):
        scheduler.apply_global_schedule(SyncSettings.create_default())

        scheduler.shutdown()

        assert registry.triggers == {}
        assert scheduler.current_schedules() == {}


class TestSchedulerFire:
    """Tests for what happens when a trigger fires."""

    @pytest.mark.asyncio
    async def test_global_fire_syncs_institutions_on_default(
        self, scheduler, registry, sync_command
    ):
        scheduler.apply_global_schedule(SyncSettings.create_default())

        await registry.triggers[GLOBAL_SCHEDULE_KEY].callback()

        sync_command.execute.assert_awaited_once_with(
            institution_ids=None,
            respect_schedule=True,
        )
        assert scheduler.metrics.total_executions == 1
        assert scheduler.metrics.successful_executions == 1
        assert scheduler.metrics.last_success_at is not None

    @pytest.mark.asyncio
    async def test_institution_fire_syncs_one_institution(
        self, scheduler, sync_command
    ):
        await scheduler.fire("inst-1")

        sync_command.execute.assert_awaited_once_with(
            institution_ids=["inst-1"],
            respect_schedule=False,
        )

    @pytest.mark.asyncio
    async def test_skips_when_batch_running(self, scheduler, sync_command, history):
        await history.create(SyncRun.create_batch(2).start())

        await scheduler.fire(GLOBAL_SCHEDULE_KEY)

        sync_command.execute.assert_not_awaited()
        assert scheduler.metrics.total_executions == 0

    @pytest.mark.asyncio
    async def test_skips_during_quiet_hours(
        self, scheduler, sync_command, settings_repo
    ):
        local_now = datetime.now(ZoneInfo(TIMEZONE))
        settings_repo.settings = SyncSettings(
            quiet_hours=QuietHours(
                enabled=True,
                start=(local_now - timedelta(hours=1)).strftime("%H:%M"),
                end=(local_now + timedelta(hours=1)).strftime("%H:%M"),
            )
        )

        await scheduler.fire(GLOBAL_SCHEDULE_KEY)

        sync_command.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_batch_counts_as_failure(self, scheduler, sync_command):
        sync_command.execute.return_value = _result(SyncStatus.FAILED)

        await scheduler.fire(GLOBAL_SCHEDULE_KEY)

        assert scheduler.metrics.failed_executions == 1
        assert scheduler.metrics.last_failure_at is not None

    @pytest.mark.asyncio
    async def test_partial_success_counts_as_success(self, scheduler, sync_command):
        sync_command.execute.return_value = _result(SyncStatus.PARTIAL_SUCCESS)

        await scheduler.fire(GLOBAL_SCHEDULE_KEY)

        assert scheduler.metrics.successful_executions == 1

    @pytest.mark.asyncio
    async def test_exception_is_contained(self, scheduler, sync_command):
        """Test that a crashing sync never propagates into the trigger."""
        sync_command.execute.side_effect = RuntimeError("database gone")

        await scheduler.fire(GLOBAL_SCHEDULE_KEY)

        assert scheduler.metrics.failed_executions == 1

    @pytest.mark.asyncio
    async def test_start_rejected_by_running_batch_is_a_skip(
        self, scheduler, sync_command
    ):
        """Test that losing a start race is not counted as a failed fire."""
        sync_command.execute.side_effect = SyncAlreadyRunningError(uuid4())

        await scheduler.fire(GLOBAL_SCHEDULE_KEY)

        sync_command.execute.assert_awaited_once()
        assert scheduler.metrics.total_executions == 0
        assert scheduler.metrics.failed_executions == 0

    @pytest.mark.asyncio
    async def test_reset_metrics(self, scheduler):
        await scheduler.fire(GLOBAL_SCHEDULE_KEY)

        scheduler.reset_metrics()

        assert scheduler.metrics.total_executions == 0
        assert scheduler.metrics.to_dict()["last_execution_at"] is None


class TestSchedulerMetrics:
    def test_average_duration_is_running_mean(self):
        metrics = SchedulerMetrics()
        at = utc_now()

        metrics.record(at, 100.0, success=True)
        metrics.record(at, 300.0, success=False)

        assert metrics.average_duration_ms == 200.0
        assert metrics.to_dict()["total_executions"] == 2
