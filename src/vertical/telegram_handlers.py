"""Telegram command handlers."""

import asyncio
import logging
from datetime import timedelta

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes, ConversationHandler

from .adapters.file_events import StorageError
from .adapters.http_events import EventServiceError
from .config import load_config
from .core.events import CalendarEvent, EventNotFoundError, InvalidEventError
from .extraction import ExtractionError
from .telegram_format import send_markdown
from .telegram_states import AddEventStates
from .workflows import (
    create_event_from_text,
    format_agenda,
    format_event_line,
    get_repository,
    load_agenda,
    resolve_event_id,
    today,
)

logger = logging.getLogger(__name__)

BOT_ERRORS = (
    InvalidEventError,
    ExtractionError,
    EventNotFoundError,
    StorageError,
    EventServiceError,
    RuntimeError,
)

HELP_TEXT = (
    "*Vertical Commands*\n\n"
    "/today - Today's events\n"
    "/week - The next days, day by day\n"
    "/add <text> - Add an event described in plain language\n"
    "/delete <id> - Delete an event\n"
    "/cancel - Cancel current operation\n"
    "/help - Show all commands"
)


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hey! I'm Vertical, your calendar.\n\n"
        "Tell me about an event with /add, e.g.\n"
        "/add dentist next Tuesday\n"
        "/add trip to Lisbon June 6 to 16\n"
        "/add team sync every other Friday until December\n\n"
        "Use /help for all commands."
    )


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


async def _reply_agenda(update: Update, days: int, include_empty: bool, empty_msg: str):
    config = load_config()
    try:
        listing = await asyncio.to_thread(
            load_agenda, config, today(config), days, include_empty
        )
    except BOT_ERRORS as e:
        logger.error(f"Failed to load agenda: {e}")
        await update.message.reply_text(f"Failed to load events: {e}")
        return

    if not listing or all(day.is_empty for day in listing):
        await update.message.reply_text(empty_msg)
        return
    await send_markdown(update.message, format_agenda(listing))


async def today_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /today command - events active today."""
    await _reply_agenda(update, 1, False, "No events today.")


async def week_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /week command - day-by-day agenda."""
    config = load_config()
    await _reply_agenda(update, config.agenda_days, True, "No events in the next days.")


async def delete_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /delete <id> command."""
    if not context.args:
        await update.message.reply_text("Usage: /delete <event id>")
        return

    config = load_config()
    repository = get_repository(config)

    def _delete() -> bool:
        return repository.delete(resolve_event_id(repository, context.args[0]))

    try:
        deleted = await asyncio.to_thread(_delete)
    except BOT_ERRORS as e:
        await update.message.reply_text(f"Could not delete: {e}")
        return

    await update.message.reply_text("Event deleted." if deleted else "Event not found.")


async def unauthorized_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Reply to users outside the allow-list."""
    user = update.effective_user
    logger.warning(f"Unauthorized access attempt from user {user.id} ({user.username})")
    if update.message:
        await update.message.reply_text("Unauthorized. This bot is private.")


# ============== Add Event Conversation ==============


async def add_start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Parse /add text and ask for confirmation."""
    text = " ".join(context.args or []).strip()
    if not text:
        await update.message.reply_text("Usage: /add <event description>")
        return ConversationHandler.END

    config = load_config()
    await update.message.reply_text("Parsing...")
    try:
        event = await asyncio.to_thread(create_event_from_text, config, text, False)
    except BOT_ERRORS as e:
        logger.error(f"Failed to parse event: {e}")
        await update.message.reply_text(f"Failed to parse event: {e}")
        return ConversationHandler.END

    context.user_data["pending_event"] = event.to_dict()

    keyboard = [
        [
            InlineKeyboardButton("Save", callback_data="add_save"),
            InlineKeyboardButton("Cancel", callback_data="add_cancel"),
        ]
    ]
    await update.message.reply_text(
        f"{format_event_line(event)}\n\nSave this event?",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )
    return AddEventStates.CONFIRM


async def add_confirm_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the Save/Cancel buttons."""
    query = update.callback_query
    await query.answer()

    pending = context.user_data.pop("pending_event", None)
    if query.data != "add_save" or pending is None:
        await query.edit_message_text("Cancelled.")
        return ConversationHandler.END

    config = load_config()
    repository = get_repository(config)
    try:
        created = await asyncio.to_thread(repository.create, CalendarEvent.from_dict(pending))
    except BOT_ERRORS as e:
        logger.error(f"Failed to save event: {e}")
        await query.edit_message_text(f"Failed to save event: {e}")
        return ConversationHandler.END

    await query.edit_message_text(f"Added: {format_event_line(created)}")
    return ConversationHandler.END


async def add_cancel_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /cancel during the add conversation."""
    context.user_data.pop("pending_event", None)
    await update.message.reply_text("Cancelled.")
    return ConversationHandler.END


# ============== Scheduled Messages ==============


async def send_scheduled_agenda(bot, user_ids: list[int], config=None):
    """Send the upcoming agenda to all authorized users."""
    config = config or load_config()
    start = today(config)

    try:
        listing = await asyncio.to_thread(load_agenda, config, start, config.agenda_days, False)
    except BOT_ERRORS as e:
        logger.error(f"Failed to load scheduled agenda: {e}")
        return

    end = start + timedelta(days=config.agenda_days - 1)
    if listing:
        text = f"**Agenda {start.isoformat()} - {end.isoformat()}**\n\n{format_agenda(listing)}"
    else:
        text = "No events coming up."

    logger.info("Sending scheduled agenda")
    for user_id in user_ids:
        try:
            await send_markdown(bot, text, chat_id=user_id)
        except Exception as e:
            logger.error(f"Failed to send agenda to user {user_id}: {e}")
