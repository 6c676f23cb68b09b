"""Unit tests for the QuietHours value object."""

from datetime import datetime, time

import pytest

from kakeibo.domain.sync.exceptions import InvalidSyncConfigError
from kakeibo.domain.sync.value_objects import QuietHours


class TestQuietHoursValidation:
    """Tests for time format validation."""

    def test_disabled_window_skips_validation(self):
        quiet = QuietHours(enabled=False, start="25:00", end="bogus")

        assert quiet.start == "25:00"

    @pytest.mark.parametrize(
        "value", ["24:00", "7:00", "07:60", "0700", "", "22:00\n", " 22:00"]
    )
    def test_enabled_window_rejects_bad_times(self, value):
        with pytest.raises(InvalidSyncConfigError, match="HH:mm"):
            QuietHours(enabled=True, start=value, end="06:00")

    def test_start_and_end_must_differ(self):
        with pytest.raises(InvalidSyncConfigError, match="must differ"):
            QuietHours(enabled=True, start="06:00", end="06:00")


class TestQuietHoursContains:
    """Tests for window membership."""

    @pytest.fixture
    def overnight(self):
        return QuietHours(enabled=True, start="22:00", end="06:00")

    @pytest.mark.parametrize(
        ("at", "expected"),
        [
            (time(22, 0), True),
            (time(23, 30), True),
            (time(0, 0), True),
            (time(5, 59), True),
            (time(6, 0), False),
            (time(12, 0), False),
            (time(21, 59), False),
        ],
    )
    def test_window_wrapping_midnight(self, overnight, at, expected):
        assert overnight.contains(at) is expected

    def test_window_within_one_day(self):
        quiet = QuietHours(enabled=True, start="09:00", end="17:00")

        assert quiet.contains(time(9, 0))
        assert quiet.contains(time(16, 59))
        assert not quiet.contains(time(17, 0))
        assert not quiet.contains(time(8, 59))

    def test_accepts_datetime(self, overnight):
        assert overnight.contains(datetime(2026, 3, 1, 23, 15))

    def test_disabled_never_contains(self):
        quiet = QuietHours(enabled=False, start="00:00", end="23:59")

        assert not quiet.contains(time(12, 0))
