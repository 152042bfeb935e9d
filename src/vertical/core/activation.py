"""Event activation - decides which events occupy a given day.

Pure function - no I/O. Called once per (event, date) pair while a day list
is rendered, so every malformed input resolves to "inactive" instead of
raising.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from .events import CalendarEvent, RecurrenceType

_DAYS_PER_UNIT = {
    RecurrenceType.DAILY: 1,
    RecurrenceType.WEEKLY: 7,
}


@dataclass(frozen=True)
class Activation:
    """Whether an event occupies a day, and whether its title is shown there."""

    active: bool
    show_title: bool

    def __bool__(self) -> bool:
        return self.active


INACTIVE = Activation(active=False, show_title=False)
_TITLED = Activation(active=True, show_title=True)


def recurrence_interval(event: CalendarEvent) -> int:
    """Stored interval if it is a positive integer, else 1."""
    interval = event.recurring_interval
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
        return 1
    return interval


def next_occurrence(current: date, recurrence: RecurrenceType, interval: int) -> date | None:
    """
    Step one occurrence forward from current.

    Month and year steps clamp to the end of the month (Jan 31 + 1 month is
    Feb 28/29). Returns None when the step leaves the supported calendar.
    """
    try:
        match recurrence:
            case RecurrenceType.DAILY:
                return current + timedelta(days=interval)
            case RecurrenceType.WEEKLY:
                return current + timedelta(weeks=interval)
            case RecurrenceType.MONTHLY:
                return current + relativedelta(months=interval)
            case RecurrenceType.YEARLY:
                return current + relativedelta(years=interval)
    except (OverflowError, ValueError):
        return None
    return None


def _recurs_on(event: CalendarEvent, start: date, target: date) -> bool:
    recurrence = event.recurrence
    if recurrence is RecurrenceType.NONE:
        return False

    recurrence_end = event.recurrence_end
    if recurrence_end is not None and target > recurrence_end:
        return False

    interval = recurrence_interval(event)

    # Fixed-length steps: the walk lands on target iff the gap divides evenly.
    if recurrence in _DAYS_PER_UNIT:
        step = _DAYS_PER_UNIT[recurrence] * interval
        return (target - start).days % step == 0

    # Month/year steps chain from the previous occurrence, so clamping carries.
    occurrence = start
    while occurrence <= target:
        if occurrence == target:
            return True
        following = next_occurrence(occurrence, recurrence, interval)
        if following is None or following <= occurrence:
            return False
        occurrence = following
    return False


def evaluate(event: CalendarEvent, target: date) -> Activation:
    """
    Decide whether event is active on target.

    Rules, first match wins:
      1. target is the start date: active, title shown.
      2. event has a valid end date and start < target <= end: active, title
         shown only on the last day.
      3. event recurs (and has no end date), target is after the start and
         not after the recurrence end: active on each occurrence.
    Anything else, including an unparseable start date, is inactive.
    """
    if isinstance(target, datetime):
        target = target.date()

    start = event.start
    if start is None:
        return INACTIVE

    if target == start:
        return _TITLED

    if event.is_ranged:
        end = event.end
        if end is not None and end >= start and start < target <= end:
            return Activation(active=True, show_title=target == end)
        # Ranged events never recur, even if a recurrence type is stored.
        return INACTIVE

    if target > start and _recurs_on(event, start, target):
        return _TITLED

    return INACTIVE
