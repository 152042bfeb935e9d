"""Adapters - I/O implementations of ports."""

from .file_events import FileEventStore, StorageError
from .http_events import HttpEventRepository, EventServiceError
from .claude_cli import ClaudeCLIService

__all__ = [
    "FileEventStore",
    "StorageError",
    "HttpEventRepository",
    "EventServiceError",
    "ClaudeCLIService",
]
