"""Sync interval value object.

An interval is either one of the presets, a custom span expressed as a value
and a time unit, or MANUAL. It knows how long it is in minutes, how to render
itself as a cron trigger expression, and when the next run is due.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from kakeibo.domain.shared.time import ensure_tz_aware, utc_now
from kakeibo.domain.sync.exceptions import InvalidSyncConfigError
from kakeibo.domain.sync.value_objects.cron_expression import CronExpression

MIN_INTERVAL_MINUTES = 5
MAX_INTERVAL_MINUTES = 43_200  # 30 days

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 1_440


class SyncIntervalType(Enum):
    """Interval presets plus the custom and manual kinds."""

    REALTIME = "realtime"
    FREQUENT = "frequent"
    STANDARD = "standard"
    INFREQUENT = "infrequent"
    MANUAL = "manual"
    CUSTOM = "custom"


class TimeUnit(Enum):
    """Units accepted for custom intervals."""

    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    @property
    def minutes(self) -> int:
        return _UNIT_MINUTES[self]


_UNIT_MINUTES = {
    TimeUnit.MINUTES: 1,
    TimeUnit.HOURS: MINUTES_PER_HOUR,
    TimeUnit.DAYS: MINUTES_PER_DAY,
}

_PRESET_MINUTES = {
    SyncIntervalType.REALTIME: 5,
    SyncIntervalType.FREQUENT: 60,
    SyncIntervalType.STANDARD: 360,
    SyncIntervalType.INFREQUENT: 1_440,
}


@dataclass(frozen=True)
class SyncInterval:
    """How often an institution (or the whole account book) is synced."""

    type: SyncIntervalType
    value: Optional[int] = None
    unit: Optional[TimeUnit] = None
    custom_schedule: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type != SyncIntervalType.CUSTOM:
            if self.value is not None or self.unit is not None:
                msg = f"{self.type.value} interval must not define value or unit"
                raise InvalidSyncConfigError(msg, {"type": self.type.value})
            if self.custom_schedule is not None:
                msg = "Only custom intervals can carry a cron schedule"
                raise InvalidSyncConfigError(msg, {"type": self.type.value})
            return

        self._custom_minutes()
        if self.custom_schedule is not None:
            CronExpression(self.custom_schedule)

    @classmethod
    def realtime(cls) -> "SyncInterval":
        return cls(SyncIntervalType.REALTIME)

    @classmethod
    def frequent(cls) -> "SyncInterval":
        return cls(SyncIntervalType.FREQUENT)

    @classmethod
    def standard(cls) -> "SyncInterval":
        return cls(SyncIntervalType.STANDARD)

    @classmethod
    def infrequent(cls) -> "SyncInterval":
        return cls(SyncIntervalType.INFREQUENT)

    @classmethod
    def manual(cls) -> "SyncInterval":
        return cls(SyncIntervalType.MANUAL)

    @classmethod
    def custom(
        cls,
        value: int,
        unit: TimeUnit,
        custom_schedule: Optional[str] = None,
    ) -> "SyncInterval":
        return cls(
            SyncIntervalType.CUSTOM,
            value=value,
            unit=unit,
            custom_schedule=custom_schedule,
        )

    @property
    def is_manual(self) -> bool:
        return self.type == SyncIntervalType.MANUAL

    def to_minutes(self) -> int:
        """Length of the interval in minutes; 0 for MANUAL."""
        if self.type == SyncIntervalType.MANUAL:
            return 0
        if self.type == SyncIntervalType.CUSTOM:
            return self._custom_minutes()
        return _PRESET_MINUTES[self.type]

    def to_cron_expression(self) -> Optional[str]:
        """Render the interval as a cron trigger expression.

        MANUAL yields None. An explicit custom schedule is returned verbatim.
        Otherwise the expression is derived from the minute count, coarsening
        to whole hours or whole days as the interval grows.
        """
        if self.type == SyncIntervalType.MANUAL:
            return None
        if self.custom_schedule:
            return self.custom_schedule

        minutes = self.to_minutes()
        if minutes < MINUTES_PER_HOUR:
            return f"*/{minutes} * * * *"
        if minutes < MINUTES_PER_DAY:
            return f"0 */{minutes // MINUTES_PER_HOUR} * * *"
        return f"0 0 */{minutes // MINUTES_PER_DAY} * *"

    def next_run_after(
        self,
        last: Optional[datetime],
        now: Optional[datetime] = None,
    ) -> datetime:
        """Compute when the next run is due.

        Never returns a moment earlier than ``now``: a missing last run or an
        overdue one both mean "run now".
        """
        if self.type == SyncIntervalType.MANUAL:
            msg = "Manual interval has no next run time"
            raise InvalidSyncConfigError(msg, {"type": self.type.value})

        current = ensure_tz_aware(now) if now else utc_now()
        if last is None:
            return current

        candidate = ensure_tz_aware(last) + timedelta(minutes=self.to_minutes())
        if candidate < current:
            return current
        return candidate

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "value": self.value,
            "unit": self.unit.value if self.unit else None,
            "custom_schedule": self.custom_schedule,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncInterval":
        try:
            interval_type = SyncIntervalType(data["type"])
            unit = TimeUnit(data["unit"]) if data.get("unit") else None
        except (KeyError, ValueError) as e:
            msg = f"Invalid interval data: {data!r}"
            raise InvalidSyncConfigError(msg) from e
        return cls(
            type=interval_type,
            value=data.get("value"),
            unit=unit,
            custom_schedule=data.get("custom_schedule"),
        )

    def _custom_minutes(self) -> int:
        if self.value is None or self.unit is None:
            msg = "Custom interval requires value and unit"
            raise InvalidSyncConfigError(msg)

        if isinstance(self.value, bool) or not isinstance(self.value, int):
            msg = f"Custom interval value must be an integer, got {self.value!r}"
            raise InvalidSyncConfigError(msg)

        minutes = self.value * self.unit.minutes
        if not MIN_INTERVAL_MINUTES <= minutes <= MAX_INTERVAL_MINUTES:
            msg = (
                f"Custom interval must be between {MIN_INTERVAL_MINUTES} and "
                f"{MAX_INTERVAL_MINUTES} minutes, got {minutes}"
            )
            raise InvalidSyncConfigError(
                msg,
                {"value": self.value, "unit": self.unit.value, "minutes": minutes},
            )
        return minutes

    def __str__(self) -> str:
        if self.type == SyncIntervalType.CUSTOM:
            return f"every {self.value} {self.unit.value if self.unit else ''}".strip()
        return self.type.value
