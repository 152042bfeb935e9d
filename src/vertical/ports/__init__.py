"""Ports - interfaces/protocols for external dependencies."""

from .event_repo import EventRepository
from .llm_service import LLMService

__all__ = [
    "EventRepository",
    "LLMService",
]
