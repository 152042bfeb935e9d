"""Event repository interface."""

from typing import Protocol

from vertical.core.events import CalendarEvent


class EventRepository(Protocol):
    """Interface for storing calendar events in any backend."""

    def list_events(self) -> list[CalendarEvent]:
        """Fetch all events, in storage order."""
        ...

    def get(self, event_id: str) -> CalendarEvent | None:
        """Fetch one event. Returns None if not found."""
        ...

    def create(self, event: CalendarEvent) -> CalendarEvent:
        """Store a new event. Returns the stored record with its id."""
        ...

    def update(self, event_id: str, changes: dict) -> CalendarEvent:
        """Apply field changes to an event. Returns the updated record."""
        ...

    def delete(self, event_id: str) -> bool:
        """Delete an event. Returns False if nothing matched."""
        ...
