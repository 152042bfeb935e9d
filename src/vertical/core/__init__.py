"""Functional core - pure calendar logic with no I/O."""

from .events import (
    CalendarEvent,
    EventNotFoundError,
    InvalidEventError,
    RecurrenceType,
    normalize_event,
    parse_calendar_date,
    validate_event,
)
from .activation import Activation, evaluate
from .agenda import ActiveEvent, AgendaDay, CalendarWindow, build_agenda, events_for_date

__all__ = [
    # Events
    "CalendarEvent",
    "EventNotFoundError",
    "InvalidEventError",
    "RecurrenceType",
    "normalize_event",
    "parse_calendar_date",
    "validate_event",
    # Activation
    "Activation",
    "evaluate",
    # Agenda
    "ActiveEvent",
    "AgendaDay",
    "CalendarWindow",
    "build_agenda",
    "events_for_date",
]
