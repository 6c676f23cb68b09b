"""Unit tests for the global SyncSettings entity."""

import pytest

from kakeibo.domain.sync.entities import SyncSettings
from kakeibo.domain.sync.exceptions import InvalidSyncConfigError
from kakeibo.domain.sync.value_objects import SyncInterval, TimeUnit


class TestSyncSettingsDefaults:
    def test_create_default(self):
        settings = SyncSettings.create_default()

        assert settings.default_interval == SyncInterval.standard()
        assert settings.auto_retry is True
        assert settings.max_retry_count == 3
        assert settings.wifi_only is False
        assert settings.battery_saving_mode is False
        assert settings.quiet_hours.enabled is False
        assert (settings.quiet_hours.start, settings.quiet_hours.end) == (
            "22:00",
            "06:00",
        )

    @pytest.mark.parametrize("count", [0, 11, -1])
    def test_retry_count_out_of_range(self, count):
        with pytest.raises(InvalidSyncConfigError, match="max_retry_count"):
            SyncSettings(max_retry_count=count)


class TestSyncSettingsUpdates:
    """Tests for partial updates."""

    def test_update_default_interval(self):
        settings = SyncSettings.create_default()
        interval = SyncInterval.custom(2, TimeUnit.HOURS)

        updated = settings.update_default_interval(interval)

        assert updated.default_interval == interval
        assert updated.id == settings.id
        assert updated.updated_at >= settings.updated_at
        assert settings.default_interval == SyncInterval.standard()

    def test_update_options_leaves_unspecified_fields(self):
        settings = SyncSettings.create_default()

        updated = settings.update_options(wifi_only=True, max_retry_count=5)

        assert updated.wifi_only is True
        assert updated.max_retry_count == 5
        assert updated.auto_retry is True
        assert updated.battery_saving_mode is False
        assert updated.quiet_hours == settings.quiet_hours

    def test_update_quiet_hours(self):
        settings = SyncSettings.create_default()

        updated = settings.update_options(
            quiet_hours_enabled=True,
            quiet_hours_start="23:00",
            quiet_hours_end="07:00",
        )

        assert updated.quiet_hours.enabled
        assert updated.quiet_hours.start == "23:00"
        assert updated.quiet_hours.end == "07:00"

    def test_update_rejects_invalid_quiet_hours(self):
        settings = SyncSettings.create_default()

        with pytest.raises(InvalidSyncConfigError):
            settings.update_options(quiet_hours_enabled=True, quiet_hours_start="7am")

    def test_update_rejects_invalid_retry_count(self):
        settings = SyncSettings.create_default()

        with pytest.raises(InvalidSyncConfigError):
            settings.update_options(max_retry_count=20)
