"""Conversation states for Telegram bot."""

from enum import IntEnum, auto


class AddEventStates(IntEnum):
    """States for the add-event conversation."""

    CONFIRM = auto()
