"""Events API adapter - HTTP client for a remote event service."""

import logging

import requests

from vertical.core.events import (
    CalendarEvent,
    EventNotFoundError,
    InvalidEventError,
    normalize_event,
    validate_event,
)

logger = logging.getLogger(__name__)

EVENTS_PATH = "/api/events"
PARSE_PATH = "/api/events/parse"


class EventServiceError(Exception):
    """Raised when the events API fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class HttpEventRepository:
    """
    Events API adapter.

    Implements EventRepository protocol against the /api/events endpoints.
    No business logic - just I/O.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 10,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Make an API request, raising EventServiceError on failure."""
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Events API {method} {url} failed: {e}")
            raise EventServiceError(f"Events API unreachable: {e}") from e

        if not resp.ok:
            try:
                message = resp.json().get("error") or resp.reason
            except ValueError:
                message = resp.text or resp.reason
            logger.error(f"Events API {method} {url} returned {resp.status_code}: {message}")
            raise EventServiceError(message, status_code=resp.status_code)
        return resp

    @staticmethod
    def _payload(event: CalendarEvent) -> dict:
        data = event.to_dict()
        for key in ("id", "created_at", "updated_at"):
            data.pop(key, None)
        return data

    def list_events(self) -> list[CalendarEvent]:
        """Fetch all events."""
        data = self._request("GET", EVENTS_PATH).json()
        return [CalendarEvent.from_dict(item) for item in data or []]

    def get(self, event_id: str) -> CalendarEvent | None:
        """Fetch one event. The API has no single-event endpoint."""
        return next((e for e in self.list_events() if e.id == event_id), None)

    def create(self, event: CalendarEvent) -> CalendarEvent:
        """Create an event. The server assigns the id."""
        event = normalize_event(event)
        validate_event(event)
        resp = self._request("POST", EVENTS_PATH, json=self._payload(event))
        return CalendarEvent.from_dict(resp.json())

    def update(self, event_id: str, changes: dict) -> CalendarEvent:
        """
        Apply field changes to an event.

        The merged record is normalized here before it is sent, since the
        server stores whatever it receives.
        """
        changes = {k: v for k, v in changes.items() if k not in ("id", "created_at", "updated_at")}
        if not changes:
            raise InvalidEventError("Missing update data")

        existing = self.get(event_id)
        if existing is None:
            raise EventNotFoundError(f"Event with ID {event_id} not found")
        merged = normalize_event(CalendarEvent.from_dict({**existing.to_dict(), **changes}))
        validate_event(merged)

        try:
            resp = self._request("PUT", EVENTS_PATH, params={"id": event_id}, json=self._payload(merged))
        except EventServiceError as e:
            if e.status_code == 404:
                raise EventNotFoundError(f"Event with ID {event_id} not found") from e
            raise
        return CalendarEvent.from_dict(resp.json())

    def delete(self, event_id: str) -> bool:
        """Delete an event by id."""
        try:
            self._request("DELETE", EVENTS_PATH, params={"id": event_id})
        except EventServiceError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def parse_text(self, text: str) -> CalendarEvent:
        """Ask the service to turn free text into an (unsaved) event."""
        resp = self._request("POST", PARSE_PATH, json={"text": text})
        return normalize_event(CalendarEvent.from_dict(resp.json()))
