"""Unit tests for the InstitutionSyncSettings entity."""

from datetime import datetime, timedelta, timezone

from kakeibo.domain.sync.entities import InstitutionSyncSettings
from kakeibo.domain.sync.value_objects import (
    InstitutionSyncStatus,
    SyncInterval,
    TimeUnit,
)

DEFAULT = SyncInterval.standard()


class TestInstitutionSyncSettingsCreate:
    def test_create_inherits_default(self):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        assert settings.inherits_default
        assert settings.effective_interval(DEFAULT) == DEFAULT
        assert settings.enabled
        assert settings.sync_status == InstitutionSyncStatus.IDLE
        assert settings.error_count == 0

    def test_never_synced_is_due_now(self):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        assert settings.next_sync_at is not None
        assert settings.next_sync_at <= datetime.now(timezone.utc)

    def test_create_disabled_has_no_next_sync(self):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT, enabled=False)

        assert settings.next_sync_at is None


class TestInstitutionSyncSettingsInterval:
    """Tests for interval changes and next sync recomputation."""

    def test_explicit_interval_overrides_default(self):
        own = SyncInterval.custom(30, TimeUnit.MINUTES)
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        updated = settings.update_interval(own, DEFAULT)

        assert not updated.inherits_default
        assert updated.effective_interval(DEFAULT) == own

    def test_clearing_interval_follows_default_again(self):
        settings = InstitutionSyncSettings.create(
            "inst-1", DEFAULT, interval=SyncInterval.frequent()
        )

        updated = settings.update_interval(None, DEFAULT)

        assert updated.inherits_default

    def test_manual_interval_has_no_next_sync(self):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        updated = settings.update_interval(SyncInterval.manual(), DEFAULT)

        assert updated.next_sync_at is None

    def test_default_change_moves_next_sync(self):
        synced_at = datetime.now(timezone.utc)
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)
        settings = settings.record_successful_sync(synced_at, DEFAULT)

        updated = settings.apply_default_interval(SyncInterval.infrequent())

        assert settings.next_sync_at == synced_at + timedelta(hours=6)
        assert updated.next_sync_at == synced_at + timedelta(days=1)

    def test_disable_and_enable(self):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        disabled = settings.set_enabled(False, DEFAULT)
        enabled = disabled.set_enabled(True, DEFAULT)

        assert disabled.next_sync_at is None
        assert enabled.next_sync_at is not None


class TestInstitutionSyncSettingsHealth:
    """Tests for sync status and error bookkeeping."""

    def test_increment_error_count(self):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        failed = settings.increment_error_count("timeout").increment_error_count()

        assert failed.error_count == 2
        assert failed.last_error == "timeout"
        assert failed.sync_status == InstitutionSyncStatus.ERROR

    def test_successful_sync_resets_errors(self):
        synced_at = datetime.now(timezone.utc)
        settings = (
            InstitutionSyncSettings.create("inst-1", DEFAULT)
            .mark_syncing()
            .increment_error_count("boom")
        )

        recovered = settings.record_successful_sync(synced_at, DEFAULT)

        assert recovered.error_count == 0
        assert recovered.last_error is None
        assert recovered.last_synced_at == synced_at
        assert recovered.sync_status == InstitutionSyncStatus.IDLE

    def test_reset_error_count(self):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        reset = settings.increment_error_count("boom").reset_error_count(DEFAULT)

        assert reset.error_count == 0
        assert reset.sync_status == InstitutionSyncStatus.IDLE

    def test_mark_syncing_and_idle(self):
        settings = InstitutionSyncSettings.create("inst-1", DEFAULT)

        assert settings.mark_syncing().sync_status == InstitutionSyncStatus.SYNCING
        assert (
            settings.mark_syncing().mark_idle().sync_status
            == InstitutionSyncStatus.IDLE
        )
