"""Pure agenda logic - builds per-day event lists from an event collection."""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Iterator

from .activation import evaluate
from .events import CalendarEvent

logger = logging.getLogger(__name__)


@dataclass
class ActiveEvent:
    """An event occupying a day."""

    event: CalendarEvent
    show_title: bool


@dataclass
class AgendaDay:
    """One row of the day list."""

    date: date
    entries: list[ActiveEvent] = field(default_factory=list)
    show_year_header: bool = False
    show_month_header: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.entries


@dataclass
class CalendarWindow:
    """A contiguous, inclusive range of days that can be listed."""

    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Window end {self.end} is before start {self.start}")

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def index_of(self, day: date) -> int:
        """Row index of a day. Raises ValueError outside the window."""
        if not self.contains(day):
            raise ValueError(f"{day} is outside {self.start}..{self.end}")
        return (day - self.start).days

    def date_at(self, index: int) -> date:
        """Day at a row index. Raises IndexError outside the window."""
        if index < 0 or index >= self.total_days:
            raise IndexError(f"Row {index} is outside the window")
        return self.start + timedelta(days=index)

    def clamp(self, day: date) -> date:
        return min(max(day, self.start), self.end)

    def __iter__(self) -> Iterator[date]:
        for offset in range(self.total_days):
            yield self.start + timedelta(days=offset)


def events_for_date(target: date, events: Iterable[CalendarEvent]) -> list[ActiveEvent]:
    """
    Collect the events active on target.

    Pure function - no I/O. Keeps the order events were supplied in; records
    without a title or start date are skipped.
    """
    active = []
    for event in events:
        if not event or not event.title or not event.event_date:
            logger.debug(f"Skipping incomplete event record: {event!r}")
            continue
        result = evaluate(event, target)
        if result.active:
            active.append(ActiveEvent(event=event, show_title=result.show_title))
    return active


def build_agenda(
    start: date,
    days: int,
    events: Iterable[CalendarEvent],
    include_empty: bool = True,
) -> list[AgendaDay]:
    """
    Build the day list for `days` consecutive dates from start.

    The first day carries both headers; a new year shows both again, a new
    month shows the month header. With include_empty=False days without
    events are dropped after headers are assigned.
    """
    events = list(events)
    agenda = []
    previous = None

    for offset in range(max(days, 0)):
        current = start + timedelta(days=offset)
        if previous is None or current.year != previous.year:
            show_year = show_month = True
        else:
            show_year = False
            show_month = current.month != previous.month

        agenda.append(
            AgendaDay(
                date=current,
                entries=events_for_date(current, events),
                show_year_header=show_year,
                show_month_header=show_month,
            )
        )
        previous = current

    if not include_empty:
        agenda = [day for day in agenda if not day.is_empty]
    return agenda
