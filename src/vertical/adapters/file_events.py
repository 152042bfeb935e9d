"""File-based event storage adapter."""

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from vertical.core.events import (
    CalendarEvent,
    EventNotFoundError,
    InvalidEventError,
    normalize_event,
    validate_event,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the event file cannot be read."""

    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FileEventStore:
    """
    File-based event storage.

    Implements EventRepository protocol. All events live in one JSON array.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text() or "[]")
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt event file {self.path}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"Corrupt event file {self.path}: expected a JSON array")
        return [item for item in data if isinstance(item, dict)]

    def _save(self, records: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(records, indent=2))
        tmp.replace(self.path)

    def list_events(self) -> list[CalendarEvent]:
        """Fetch all events, in storage order."""
        return [CalendarEvent.from_dict(item) for item in self._load()]

    def get(self, event_id: str) -> CalendarEvent | None:
        """Fetch one event. Returns None if not found."""
        for item in self._load():
            if str(item.get("id")) == event_id:
                return CalendarEvent.from_dict(item)
        return None

    def create(self, event: CalendarEvent) -> CalendarEvent:
        """Store a new event under a fresh id."""
        event = normalize_event(event)
        validate_event(event)

        now = _now()
        event.id = str(uuid.uuid4())
        event.created_at = now
        event.updated_at = now

        records = self._load()
        records.append(event.to_dict())
        self._save(records)
        logger.info(f"Created event {event.id}: {event.title}")
        return event

    def update(self, event_id: str, changes: dict) -> CalendarEvent:
        """Apply field changes to an event and re-normalize it."""
        changes = {k: v for k, v in changes.items() if k not in ("id", "created_at", "updated_at")}
        if not changes:
            raise InvalidEventError("Missing update data")

        records = self._load()
        for index, item in enumerate(records):
            if str(item.get("id")) != event_id:
                continue
            event = normalize_event(CalendarEvent.from_dict({**item, **changes}))
            validate_event(event)
            event.updated_at = _now()
            records[index] = event.to_dict()
            self._save(records)
            logger.info(f"Updated event {event_id}")
            return event

        raise EventNotFoundError(f"Event with ID {event_id} not found")

    def delete(self, event_id: str) -> bool:
        """Delete an event. Returns False if nothing matched."""
        records = self._load()
        remaining = [item for item in records if str(item.get("id")) != event_id]
        if len(remaining) == len(records):
            return False
        self._save(remaining)
        logger.info(f"Deleted event {event_id}")
        return True
