"""Configuration management for Vertical."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

VERTICAL_HOME = Path(os.environ.get("VERTICAL_HOME", Path.home() / "vertical"))
CONFIG_FILE = VERTICAL_HOME / "config" / "vertical.conf"
DATA_DIR = VERTICAL_HOME / "data"


@dataclass
class Config:
    """Vertical configuration."""

    events_file: str = ""
    events_api_url: str = ""
    events_api_timeout: int = 10
    timezone: str = "America/Toronto"
    window_start: str = "1970-01-01"
    window_end: str = "2100-12-31"
    agenda_days: int = 7
    claude_timeout: int = 120
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)
    telegram_agenda_time: str = "07:00"

    @property
    def events_path(self) -> Path:
        """Resolved location of the JSON event store."""
        if self.events_file:
            return Path(self.events_file).expanduser()
        return DATA_DIR / "events.json"


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from vertical.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "events_file":
                config.events_file = value
            case "events_api_url":
                config.events_api_url = value.rstrip("/")
            case "events_api_timeout":
                config.events_api_timeout = _parse_int(key, value, config.events_api_timeout)
            case "timezone":
                config.timezone = value
            case "window_start":
                config.window_start = value
            case "window_end":
                config.window_end = value
            case "agenda_days":
                config.agenda_days = _parse_int(key, value, config.agenda_days)
            case "claude_timeout":
                config.claude_timeout = _parse_int(key, value, config.claude_timeout)
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                try:
                    config.telegram_allowed_users = [int(u.strip()) for u in value.split(",") if u.strip()]
                except ValueError:
                    logger.warning(f"Invalid TELEGRAM_ALLOWED_USERS: {value!r}")
            case "telegram_agenda_time":
                config.telegram_agenda_time = value
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    return config
