"""Pure event domain logic - no I/O dependencies."""

import re
from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from enum import Enum

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$")


class RecurrenceType(Enum):
    """How often a recurring event repeats."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value) -> "RecurrenceType":
        """Map a stored value to a RecurrenceType. Unknown values are NONE."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.NONE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.NONE


class InvalidEventError(ValueError):
    """Raised when an event record cannot be written."""

    pass


class EventNotFoundError(Exception):
    """Raised when an event id does not match a stored event."""

    pass


def parse_calendar_date(value) -> date | None:
    """
    Parse a stored calendar date.

    Accepts date objects, datetimes (date part) and "YYYY-MM-DD" strings,
    optionally followed by a time part. Returns None for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = _DATE_PATTERN.match(value.strip())
    if not match:
        return None
    try:
        return date(int(match[1]), int(match[2]), int(match[3]))
    except ValueError:
        return None


def _is_present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _serialize_date(value):
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass
class CalendarEvent:
    """A calendar event as stored."""

    id: str
    title: str
    event_date: str | date
    event_end_date: str | date | None = None
    event_type: str = "personal"
    recurring_type: str | None = "none"
    recurring_interval: int | None = None
    recurring_end_date: str | date | None = None
    description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def start(self) -> date | None:
        return parse_calendar_date(self.event_date)

    @property
    def end(self) -> date | None:
        return parse_calendar_date(self.event_end_date)

    @property
    def recurrence_end(self) -> date | None:
        return parse_calendar_date(self.recurring_end_date)

    @property
    def recurrence(self) -> RecurrenceType:
        return RecurrenceType.parse(self.recurring_type)

    @property
    def is_ranged(self) -> bool:
        """True when an end date is stored, whether or not it parses."""
        return _is_present(self.event_end_date)

    @property
    def is_recurring(self) -> bool:
        return not self.is_ranged and self.recurrence is not RecurrenceType.NONE

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarEvent":
        """Create a CalendarEvent from a stored or API record."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["id"] = str(values.get("id") or "")
        values.setdefault("title", "")
        values.setdefault("event_date", "")
        return cls(**values)

    def to_dict(self) -> dict:
        """Serialize to the stored JSON shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "event_date": _serialize_date(self.event_date),
            "event_end_date": _serialize_date(self.event_end_date),
            "event_type": self.event_type,
            "recurring_type": self.recurring_type,
            "recurring_interval": self.recurring_interval,
            "recurring_end_date": _serialize_date(self.recurring_end_date),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def normalize_event(event: CalendarEvent) -> CalendarEvent:
    """
    Apply the write-time invariants to an event.

    Ranged events never recur, and non-recurring events carry no interval or
    recurrence end. Returns a new event; the input is left untouched.
    """
    if event.is_ranged:
        recurrence = RecurrenceType.NONE
    else:
        recurrence = RecurrenceType.parse(event.recurring_type)

    if recurrence is RecurrenceType.NONE:
        interval = None
        recurrence_end = None
    else:
        interval = event.recurring_interval
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
            interval = 1
        recurrence_end = _serialize_date(event.recurring_end_date) or None

    return replace(
        event,
        title=event.title.strip() if isinstance(event.title, str) else event.title,
        event_date=_serialize_date(event.event_date),
        event_end_date=_serialize_date(event.event_end_date) or None,
        event_type=event.event_type or "personal",
        recurring_type=recurrence.value,
        recurring_interval=interval,
        recurring_end_date=recurrence_end,
        description=event.description or None,
    )


def validate_event(event: CalendarEvent) -> None:
    """Raise InvalidEventError if the event is not fit to be stored."""
    if not isinstance(event.title, str) or not event.title.strip():
        raise InvalidEventError("Missing required field: title")
    if not _is_present(event.event_date):
        raise InvalidEventError("Missing required field: event_date")
    if event.start is None:
        raise InvalidEventError(f"Invalid event_date: {event.event_date!r}")
    if event.is_ranged and event.end is None:
        raise InvalidEventError(f"Invalid event_end_date: {event.event_end_date!r}")
    if _is_present(event.recurring_end_date) and event.recurrence_end is None:
        raise InvalidEventError(f"Invalid recurring_end_date: {event.recurring_end_date!r}")
