"""Vertical CLI - Personal Calendar."""

import json
import logging
import sys
from datetime import date

import click

from .adapters.file_events import StorageError
from .adapters.http_events import EventServiceError
from .config import load_config
from .core.events import CalendarEvent, EventNotFoundError, InvalidEventError, RecurrenceType
from .extraction import ExtractionError
from .workflows import (
    create_event_from_text,
    format_agenda,
    format_event_line,
    get_repository,
    load_agenda,
    resolve_event_id,
    today,
)

# Failures that are reported as "Error: ..." rather than a traceback
CLI_ERRORS = (
    InvalidEventError,
    ExtractionError,
    EventNotFoundError,
    StorageError,
    EventServiceError,
    RuntimeError,
)

DATE = click.DateTime(formats=["%Y-%m-%d"])
RECURRENCE_CHOICES = click.Choice([r.value for r in RecurrenceType])


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _as_date(value) -> date | None:
    return value.date() if value is not None else None


def _echo_events(events: list[CalendarEvent], as_json: bool, empty_msg: str) -> None:
    if as_json:
        click.echo(json.dumps([e.to_dict() for e in events], indent=2))
        return
    if not events:
        click.echo(empty_msg)
        return
    for event in events:
        click.echo(format_event_line(event))


@click.group()
@click.version_option()
@click.option("-v", "--verbose", is_flag=True, help="Log to stderr")
def main(verbose: bool):
    """Vertical - Personal Calendar CLI."""
    if verbose:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("title")
@click.option("--date", "start", type=DATE, help="Start date (YYYY-MM-DD), defaults to today")
@click.option("--end", type=DATE, help="Last day of a multi-day event")
@click.option("--repeat", type=RECURRENCE_CHOICES, default="none", help="Recurrence")
@click.option("--every", type=click.IntRange(min=1), help="Recurrence interval")
@click.option("--until", type=DATE, help="Last date a recurrence can fall on")
@click.option("--type", "event_type", default="personal", help="Event category")
@click.option("--description", help="Longer description")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def add(title, start, end, repeat, every, until, event_type, description, as_json):
    """Add an event from structured fields."""
    config = load_config()
    if end is not None and repeat != RecurrenceType.NONE.value:
        click.echo("Note: multi-day events do not repeat, ignoring --repeat.", err=True)

    event = CalendarEvent(
        id="",
        title=title,
        event_date=_as_date(start) or today(config),
        event_end_date=_as_date(end),
        event_type=event_type,
        recurring_type=repeat,
        recurring_interval=every,
        recurring_end_date=_as_date(until),
        description=description,
    )
    try:
        created = get_repository(config).create(event)
    except CLI_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(created.to_dict(), indent=2))
    else:
        click.echo(f"Added: {format_event_line(created)}")


@main.command()
@click.argument("text", nargs=-1, required=True)
@click.option("--dry-run", is_flag=True, help="Show the parsed event without saving it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def parse(text, dry_run: bool, as_json: bool):
    """Add an event described in plain language."""
    config = load_config()
    try:
        event = create_event_from_text(config, " ".join(text), save=not dry_run)
    except CLI_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(event.to_dict(), indent=2))
    else:
        verb = "Parsed" if dry_run else "Added"
        click.echo(f"{verb}: {format_event_line(event)}")


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_events(as_json: bool):
    """List all stored events."""
    config = load_config()
    try:
        events = get_repository(config).list_events()
    except CLI_ERRORS as e:
        _fail(e)
    _echo_events(events, as_json, "No events.")


def _show_agenda(days, as_json: bool, empty_msg: str) -> None:
    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "date": day.date.isoformat(),
                        "events": [
                            {
                                "id": entry.event.id,
                                "title": entry.event.title,
                                "show_title": entry.show_title,
                            }
                            for entry in day.entries
                        ],
                    }
                    for day in days
                ],
                indent=2,
            )
        )
        return
    if not days:
        click.echo(empty_msg)
        return
    click.echo(format_agenda(days))


@main.command()
@click.argument("target", type=DATE, required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def day(target, as_json: bool):
    """Show the events active on one day (default today)."""
    config = load_config()
    target = _as_date(target) or today(config)
    try:
        days = load_agenda(config, target, 1, include_empty=False)
    except CLI_ERRORS as e:
        _fail(e)
    _show_agenda(days, as_json, f"No events on {target.isoformat()}.")


@main.command()
@click.option("--from", "start", type=DATE, help="First day (default today)")
@click.option("--days", type=click.IntRange(min=1), help="Number of days (default AGENDA_DAYS)")
@click.option("--busy", is_flag=True, help="Only show days with events")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def agenda(start, days, busy: bool, as_json: bool):
    """Show the day-by-day agenda."""
    config = load_config()
    first = _as_date(start) or today(config)
    try:
        listing = load_agenda(config, first, days or config.agenda_days, include_empty=not busy)
    except CLI_ERRORS as e:
        _fail(e)
    _show_agenda(listing, as_json, "No events in this period.")


@main.command()
@click.argument("event_id")
@click.option("--title", help="New title")
@click.option("--date", "start", type=DATE, help="New start date")
@click.option("--end", type=DATE, help="New last day of a multi-day event")
@click.option("--no-end", is_flag=True, help="Make it a single-day event")
@click.option("--repeat", type=RECURRENCE_CHOICES, help="New recurrence")
@click.option("--every", type=click.IntRange(min=1), help="New recurrence interval")
@click.option("--until", type=DATE, help="New recurrence end")
@click.option("--type", "event_type", help="New category")
@click.option("--description", help="New description")
def edit(event_id, title, start, end, no_end, repeat, every, until, event_type, description):
    """Change fields of a stored event."""
    changes = {
        "title": title,
        "event_date": _as_date(start),
        "event_end_date": _as_date(end),
        "recurring_type": repeat,
        "recurring_interval": every,
        "recurring_end_date": _as_date(until),
        "event_type": event_type,
        "description": description,
    }
    changes = {k: v.isoformat() if isinstance(v, date) else v for k, v in changes.items() if v is not None}
    if no_end:
        changes["event_end_date"] = None

    config = load_config()
    try:
        repository = get_repository(config)
        updated = repository.update(resolve_event_id(repository, event_id), changes)
    except CLI_ERRORS as e:
        _fail(e)
    click.echo(f"Updated: {format_event_line(updated)}")


@main.command()
@click.argument("event_id")
def delete(event_id):
    """Delete a stored event."""
    config = load_config()
    try:
        repository = get_repository(config)
        deleted = repository.delete(resolve_event_id(repository, event_id))
    except CLI_ERRORS as e:
        _fail(e)

    if not deleted:
        click.echo(f"Error: Event with ID {event_id} not found", err=True)
        sys.exit(1)
    click.echo("Event deleted.")


@main.command()
def bot():
    """Run the Telegram bot."""
    from .telegram_bot import run_bot

    try:
        run_bot()
    except ValueError as e:
        _fail(e)


if __name__ == "__main__":
    main()
