"""Cron trigger expression value object.

Accepts the standard five-field crontab form and a six-field form whose
leading field is seconds. Day-of-week values follow crontab numbering
(0 or 7 is Sunday, 1 is Monday). APScheduler counts weekdays from Monday, so
the field is rewritten to weekday names before a trigger is built. Syntax is
checked by building that trigger, so every accepted expression can later be
registered as a live trigger.
"""

from dataclasses import dataclass

from apscheduler.triggers.cron import CronTrigger

from kakeibo.domain.sync.exceptions import InvalidSyncConfigError

_CRON_FIELDS = ("minute", "hour", "day", "month", "day_of_week")
_WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _weekday_number(token: str) -> int:
    token = token.lower()
    if token in _WEEKDAY_NAMES:
        return _WEEKDAY_NAMES.index(token)
    if token.isdigit() and 0 <= int(token) <= 7:
        return int(token)
    msg = f"Invalid day of week: {token!r}"
    raise ValueError(msg)


def crontab_weekdays(field: str) -> str:
    """Rewrite a crontab day-of-week field as a list of weekday names.

    Handles values, ranges, steps and lists, e.g. ``1-5`` becomes
    ``mon,tue,wed,thu,fri`` and ``0-6/2`` becomes ``sun,tue,thu,sat``.
    """
    if field in ("*", "?"):
        return "*"

    days: set[int] = set()
    for item in field.split(","):
        base, has_step, step_text = item.partition("/")
        if has_step and not (step_text.isdigit() and int(step_text) > 0):
            msg = f"Invalid step in day of week: {item!r}"
            raise ValueError(msg)
        step = int(step_text) if has_step else 1

        if base == "*":
            first, last = 0, 6
        elif "-" in base:
            start, _, end = base.partition("-")
            first, last = _weekday_number(start), _weekday_number(end)
        else:
            first = _weekday_number(base)
            last = 6 if has_step else first

        if first > last:
            msg = f"Invalid day of week range: {item!r}"
            raise ValueError(msg)
        days.update(day % 7 for day in range(first, last + 1, step))

    return ",".join(_WEEKDAY_NAMES[day] for day in sorted(days))


@dataclass(frozen=True)
class CronExpression:
    """A validated cron expression."""

    expression: str

    def __post_init__(self) -> None:
        fields = self.expression.split()
        if len(fields) not in (5, 6):
            msg = (
                f"Cron expression must have 5 or 6 fields, got {len(fields)}: "
                f"{self.expression!r}"
            )
            raise InvalidSyncConfigError(msg, {"expression": self.expression})

        try:
            self.to_trigger("UTC")
        except ValueError as e:
            msg = f"Invalid cron expression {self.expression!r}: {e}"
            raise InvalidSyncConfigError(msg, {"expression": self.expression}) from e

    @property
    def has_seconds(self) -> bool:
        return len(self.expression.split()) == 6

    def to_trigger(self, timezone: str) -> CronTrigger:
        """Build an APScheduler trigger firing in the given IANA timezone."""
        fields = self.expression.split()
        second = fields.pop(0) if len(fields) == 6 else "0"
        values = dict(zip(_CRON_FIELDS, fields))
        values["day_of_week"] = crontab_weekdays(values["day_of_week"])
        return CronTrigger(second=second, timezone=timezone, **values)

    def __str__(self) -> str:
        return self.expression
