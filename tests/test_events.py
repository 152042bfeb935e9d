"""Tests for the event model and write-time normalization."""

from datetime import date, datetime

import pytest

from vertical.core.events import (
    CalendarEvent,
    InvalidEventError,
    RecurrenceType,
    normalize_event,
    parse_calendar_date,
    validate_event,
)


class TestParseCalendarDate:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2025-06-06", date(2025, 6, 6)),
            (" 2025-06-06 ", date(2025, 6, 6)),
            ("2025-06-06T10:30:00Z", date(2025, 6, 6)),
            ("2025-06-06 10:30", date(2025, 6, 6)),
            (date(2025, 6, 6), date(2025, 6, 6)),
            (datetime(2025, 6, 6, 22, 15), date(2025, 6, 6)),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_calendar_date(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "tomorrow", "06/06/2025", "2025-6-6", "2025-13-01", "2025-02-29", 20250606],
    )
    def test_invalid_returns_none(self, value):
        assert parse_calendar_date(value) is None


class TestRecurrenceType:
    def test_parse_known(self):
        assert RecurrenceType.parse("monthly") is RecurrenceType.MONTHLY
        assert RecurrenceType.parse(RecurrenceType.DAILY) is RecurrenceType.DAILY

    def test_parse_unknown_is_none(self):
        assert RecurrenceType.parse(None) is RecurrenceType.NONE
        assert RecurrenceType.parse("hourly") is RecurrenceType.NONE
        assert RecurrenceType.parse(3) is RecurrenceType.NONE


class TestCalendarEvent:
    def test_from_dict_ignores_unknown_keys(self):
        event = CalendarEvent.from_dict(
            {"id": 7, "title": "Lunch", "event_date": "2025-04-17", "user_id": "abc"}
        )
        assert event.id == "7"
        assert event.title == "Lunch"
        assert event.event_type == "personal"
        assert event.recurring_type == "none"

    def test_from_dict_missing_fields(self):
        event = CalendarEvent.from_dict({})
        assert event.id == ""
        assert event.title == ""
        assert event.start is None

    def test_to_dict_serializes_dates(self):
        event = CalendarEvent(
            id="1",
            title="Trip",
            event_date=date(2025, 6, 6),
            event_end_date=date(2025, 6, 16),
        )
        data = event.to_dict()
        assert data["event_date"] == "2025-06-06"
        assert data["event_end_date"] == "2025-06-16"
        assert CalendarEvent.from_dict(data) == CalendarEvent(
            id="1", title="Trip", event_date="2025-06-06", event_end_date="2025-06-16"
        )

    def test_is_ranged_by_presence(self):
        assert CalendarEvent("1", "A", "2025-01-01", event_end_date="junk").is_ranged is True
        assert CalendarEvent("1", "A", "2025-01-01", event_end_date="  ").is_ranged is False
        assert CalendarEvent("1", "A", "2025-01-01").is_ranged is False

    def test_is_recurring(self):
        assert CalendarEvent("1", "A", "2025-01-01", recurring_type="weekly").is_recurring is True
        ranged = CalendarEvent("1", "A", "2025-01-01", "2025-01-03", recurring_type="weekly")
        assert ranged.is_recurring is False


class TestNormalizeEvent:
    def test_range_clears_recurrence(self):
        event = CalendarEvent(
            id="1",
            title="Trip",
            event_date="2025-06-06",
            event_end_date="2025-06-16",
            recurring_type="weekly",
            recurring_interval=2,
            recurring_end_date="2025-12-31",
        )
        normalized = normalize_event(event)
        assert normalized.recurring_type == "none"
        assert normalized.recurring_interval is None
        assert normalized.recurring_end_date is None
        assert normalized.event_end_date == "2025-06-16"

    def test_none_clears_interval_and_end(self):
        event = CalendarEvent(
            id="1", title="A", event_date="2025-01-01", recurring_interval=3, recurring_end_date="2025-05-01"
        )
        normalized = normalize_event(event)
        assert normalized.recurring_interval is None
        assert normalized.recurring_end_date is None

    def test_recurring_defaults_interval_to_one(self):
        event = CalendarEvent(id="1", title="A", event_date="2025-01-01", recurring_type="daily")
        assert normalize_event(event).recurring_interval == 1

    def test_recurring_keeps_interval_and_end(self):
        event = CalendarEvent(
            id="1",
            title="Sync",
            event_date="2025-07-11",
            recurring_type="weekly",
            recurring_interval=2,
            recurring_end_date=date(2025, 12, 31),
        )
        normalized = normalize_event(event)
        assert normalized.recurring_type == "weekly"
        assert normalized.recurring_interval == 2
        assert normalized.recurring_end_date == "2025-12-31"

    def test_unknown_recurrence_becomes_none(self):
        event = CalendarEvent(id="1", title="A", event_date="2025-01-01", recurring_type=None)
        assert normalize_event(event).recurring_type == "none"

    def test_defaults_and_cleanup(self):
        event = CalendarEvent(
            id="1", title="  A  ", event_date=date(2025, 1, 1), event_end_date="", event_type="", description=""
        )
        normalized = normalize_event(event)
        assert normalized.title == "A"
        assert normalized.event_date == "2025-01-01"
        assert normalized.event_end_date is None
        assert normalized.event_type == "personal"
        assert normalized.description is None

    def test_does_not_mutate_input(self):
        event = CalendarEvent(
            id="1", title="A", event_date="2025-01-01", event_end_date="2025-01-02", recurring_type="daily"
        )
        normalize_event(event)
        assert event.recurring_type == "daily"


class TestValidateEvent:
    def test_valid(self):
        validate_event(CalendarEvent(id="", title="A", event_date="2025-01-01"))

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"title": "", "event_date": "2025-01-01"}, "title"),
            ({"title": "A", "event_date": ""}, "event_date"),
            ({"title": "A", "event_date": "someday"}, "event_date"),
            ({"title": "A", "event_date": "2025-01-01", "event_end_date": "later"}, "event_end_date"),
            ({"title": "A", "event_date": "2025-01-01", "recurring_end_date": "never"}, "recurring_end_date"),
        ],
    )
    def test_invalid(self, kwargs, message):
        with pytest.raises(InvalidEventError, match=message):
            validate_event(CalendarEvent(id="", **kwargs))
