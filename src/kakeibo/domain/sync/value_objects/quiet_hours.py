"""Quiet hours window during which scheduled syncs are suspended."""

import re
from dataclasses import dataclass
from datetime import datetime, time

from kakeibo.domain.sync.exceptions import InvalidSyncConfigError

_TIME_PATTERN = re.compile(r"([0-1][0-9]|2[0-3]):[0-5][0-9]")


def _parse(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


@dataclass(frozen=True)
class QuietHours:
    """Daily local-time window, possibly wrapping past midnight.

    Times are only validated when the window is enabled, so a disabled window
    may keep whatever values were last stored.
    """

    enabled: bool = False
    start: str = "22:00"
    end: str = "06:00"

    def __post_init__(self) -> None:
        if not self.enabled:
            return

        for label, value in (("start", self.start), ("end", self.end)):
            if not _TIME_PATTERN.fullmatch(value or ""):
                msg = f"Quiet hours {label} must be in HH:mm format, got {value!r}"
                raise InvalidSyncConfigError(msg, {label: value})

        if self.start == self.end:
            msg = "Quiet hours start and end must differ"
            raise InvalidSyncConfigError(msg, {"start": self.start, "end": self.end})

    def contains(self, moment: time | datetime) -> bool:
        """Whether a local time of day lies in the window.

        Start is inclusive, end is exclusive. Always False when disabled.
        """
        if not self.enabled:
            return False

        at = moment.time() if isinstance(moment, datetime) else moment
        at = at.replace(second=0, microsecond=0, tzinfo=None)
        start, end = _parse(self.start), _parse(self.end)

        if start < end:
            return start <= at < end
        return at >= start or at < end
