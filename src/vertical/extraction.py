"""Natural-language event extraction.

Builds the parsing prompt, runs it through an LLMService and turns the
model's JSON answer into a normalized CalendarEvent.
"""

import json
import logging
import re
import time
import uuid
from datetime import date
from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StringConstraints,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from .core.events import CalendarEvent, RecurrenceType, normalize_event
from .ports import LLMService

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)

EVENT_TYPES = ["appointment", "holiday", "task", "personal", "meeting", "reminder"]

IsoDate = Annotated[str, StringConstraints(pattern=r"^\d{4}-\d{2}-\d{2}$")]


class ExtractionError(ValueError):
    """Raised when text cannot be turned into an event."""

    pass


class ParsedEvent(BaseModel):
    """One event as returned by the model, before normalization."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str | None = None
    event_date: IsoDate
    event_end_date: IsoDate | None = None
    event_type: str = "personal"
    recurring_type: Literal["none", "daily", "weekly", "monthly", "yearly"] = "none"
    recurring_interval: Annotated[StrictInt, Field(gt=0)] | None = None
    recurring_end_date: IsoDate | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title is required")
        return value.strip()

    @field_validator("event_end_date", "recurring_end_date", mode="before")
    @classmethod
    def _empty_date_is_none(cls, value):
        return None if value == "" else value

    @field_validator("event_type", "recurring_type", mode="before")
    @classmethod
    def _null_uses_default(cls, value, info: ValidationInfo):
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value


def compile_parse_prompt(text: str, today: date) -> str:
    """Compile the prompt that asks the model for one event object."""
    recurrence_values = ", ".join(f"'{r.value}'" for r in RecurrenceType)
    event_types = ", ".join(f"'{t}'" for t in EVENT_TYPES)
    return f"""Parse the following user input into a calendar event object. Assume the current date is {today.isoformat()}.
- Extract the title, description (if any), event_date (yyyy-MM-dd), and an optional event_end_date (yyyy-MM-dd) for events spanning multiple days.
- Determine the event_type (e.g., {event_types}). Default to 'personal' if unsure.
- Determine recurrence:
  - If the event spans multiple days (event_end_date is set), recurring_type MUST be 'none'.
  - If the event repeats (e.g., 'every week', 'monthly', 'daily'), set recurring_type (one of {recurrence_values}) and recurring_interval (e.g., 1 for 'every week', 2 for 'every other week').
  - If recurrence is specified, extract recurring_end_date (yyyy-MM-dd) if mentioned (e.g., 'until Dec 31st').
  - If no recurrence is mentioned, default recurring_type to 'none'.
- ALL dates must be in yyyy-MM-dd format.

Respond with a single JSON object and nothing else, using exactly these keys:
title, description, event_date, event_end_date, event_type, recurring_type, recurring_interval, recurring_end_date.
Use null for anything that does not apply.

User input: "{text}"
"""


def parse_model_output(raw: str) -> dict:
    """Pull the JSON object out of a model response."""
    candidates = [raw.strip()] + [m.strip() for m in _FENCE.findall(raw)]
    start, end = raw.find("{"), raw.rfind("}")
    if start != -1 and end > start:
        candidates.append(raw[start : end + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    raise ExtractionError("Invalid data format received from AI: no JSON object found")


def event_from_model_data(data: dict, event_id: str | None = None) -> CalendarEvent:
    """
    Validate model output and build a normalized event.

    Ranged events lose any recurrence; non-recurring events lose their
    interval and recurrence end.
    """
    try:
        parsed = ParsedEvent.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "event"
        raise ExtractionError(f"{field}: {error['msg']}") from e

    event = normalize_event(CalendarEvent(id=event_id or str(uuid.uuid4()), **parsed.model_dump()))

    if event.start is None:
        raise ExtractionError(f"event_date is not a valid date: {parsed.event_date}")
    if event.is_ranged and event.end is None:
        raise ExtractionError(f"event_end_date is not a valid date: {event.event_end_date}")
    return event


def extract_event(llm: LLMService, text: str, today: date) -> CalendarEvent:
    """Turn free text into an unsaved event using the LLM."""
    text = text.strip()
    if not text:
        raise ExtractionError("Input text cannot be empty.")

    logger.info(f'Parsing event text: "{text}", current date: {today.isoformat()}')
    prompt = compile_parse_prompt(text, today)

    started = time.perf_counter()
    raw = llm.generate(prompt)
    logger.info(f"Inference time: {(time.perf_counter() - started) * 1000:.2f} ms")

    data = parse_model_output(raw)
    logger.debug(f"Parsed event data (before final processing): {data}")
    event = event_from_model_data(data)
    logger.info(f"Final event object: {event.to_dict()}")
    return event
