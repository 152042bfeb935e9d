"""Shared workflow layer between CLI and Telegram.

Wires config to adapters, and renders agendas the same way for both
front ends.
"""

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .adapters.claude_cli import ClaudeCLIService
from .adapters.file_events import FileEventStore
from .adapters.http_events import HttpEventRepository
from .config import VERTICAL_HOME, Config
from .core.activation import recurrence_interval
from .core.agenda import AgendaDay, CalendarWindow, build_agenda
from .core.events import CalendarEvent, EventNotFoundError, InvalidEventError, parse_calendar_date
from .extraction import extract_event
from .ports import EventRepository, LLMService

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = CalendarWindow(date(1970, 1, 1), date(2100, 12, 31))
RANGE_PLACEHOLDER = "..."


def get_repository(config: Config) -> EventRepository:
    """Resolve the event backend from config."""
    if config.events_api_url:
        return HttpEventRepository(config.events_api_url, timeout=config.events_api_timeout)
    return FileEventStore(config.events_path)


def get_llm(config: Config) -> LLMService:
    return ClaudeCLIService(cwd=VERTICAL_HOME if VERTICAL_HOME.exists() else None, timeout=config.claude_timeout)


def today(config: Config) -> date:
    """Today's date in the configured time zone."""
    try:
        return datetime.now(ZoneInfo(config.timezone)).date()
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {config.timezone!r}, using local time")
        return date.today()


def get_window(config: Config) -> CalendarWindow:
    """The listable date range from config."""
    start = parse_calendar_date(config.window_start)
    end = parse_calendar_date(config.window_end)
    if start is None or end is None or end < start:
        logger.warning(f"Invalid calendar window {config.window_start}..{config.window_end}, using default")
        return DEFAULT_WINDOW
    return CalendarWindow(start, end)


def create_event_from_text(
    config: Config,
    text: str,
    save: bool = True,
    llm: LLMService | None = None,
    repository: EventRepository | None = None,
) -> CalendarEvent:
    """Parse free text into an event and optionally store it."""
    event = extract_event(llm or get_llm(config), text, today(config))
    if not save:
        return event
    return (repository or get_repository(config)).create(event)


def resolve_event_id(repository: EventRepository, event_id: str) -> str:
    """Expand a unique id prefix (as printed by `list`) to the full id."""
    if repository.get(event_id) is not None:
        return event_id
    matches = [e.id for e in repository.list_events() if e.id.startswith(event_id)]
    if not matches or not event_id:
        raise EventNotFoundError(f"Event with ID {event_id} not found")
    if len(matches) > 1:
        raise InvalidEventError(f"Ambiguous event ID {event_id}: matches {len(matches)} events")
    return matches[0]


def load_agenda(
    config: Config,
    start: date,
    days: int,
    include_empty: bool = True,
    repository: EventRepository | None = None,
) -> list[AgendaDay]:
    """Fetch events and build the day list, clipped to the calendar window."""
    window = get_window(config)
    if start > window.end:
        return []
    first = window.clamp(start)
    days = min(days - (first - start).days, (window.end - first).days + 1)
    if days < 1:
        return []
    events = (repository or get_repository(config)).list_events()
    return build_agenda(first, days, events, include_empty=include_empty)


def format_entry(event: CalendarEvent, show_title: bool) -> str:
    """One agenda entry: the title, a recurrence badge, or a range placeholder."""
    if not show_title:
        return RANGE_PLACEHOLDER
    if event.is_recurring:
        return f"{event.title} [{event.recurrence.value}]"
    return event.title


def format_agenda(days: list[AgendaDay]) -> str:
    """Render a day list as Markdown with year and month headers."""
    lines = []
    for day in days:
        if day.show_year_header:
            if lines:
                lines.append("")
            lines.append(f"### {day.date.year}")
        if day.show_month_header:
            if lines and not day.show_year_header:
                lines.append("")
            lines.append(f"**{day.date.strftime('%B')}**")

        label = f"{day.date.day:>2} {day.date.strftime('%a')}"
        if day.is_empty:
            lines.append(f"`{label}` -")
            continue
        for index, entry in enumerate(day.entries):
            prefix = f"`{label}`" if index == 0 else f"`{' ' * len(label)}`"
            lines.append(f"{prefix} {format_entry(entry.event, entry.show_title)}")
    return "\n".join(lines)


def format_event_line(event: CalendarEvent) -> str:
    """Single-line summary of a stored event."""
    when = str(event.event_date)
    if event.is_ranged:
        when = f"{when}..{event.event_end_date}"
    elif event.is_recurring:
        every = recurrence_interval(event)
        when = f"{when} {event.recurrence.value}"
        if every > 1:
            when = f"{when} x{every}"
        if event.recurring_end_date:
            when = f"{when} until {event.recurring_end_date}"
    return f"{event.id[:8]}  {when}  {event.title} ({event.event_type})"
