"""Vertical Telegram bot wiring."""

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
    ConversationHandler,
    MessageHandler,
    filters,
)
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import Config, load_config
from .telegram_handlers import (
    start_handler,
    help_handler,
    today_handler,
    week_handler,
    delete_handler,
    add_start_handler,
    add_confirm_handler,
    add_cancel_handler,
    unauthorized_handler,
    send_scheduled_agenda,
)
from .telegram_states import AddEventStates

logger = logging.getLogger(__name__)

COMMANDS = {
    "start": start_handler,
    "help": help_handler,
    "today": today_handler,
    "week": week_handler,
    "delete": delete_handler,
}


class AuthFilter(filters.BaseFilter):
    """Pass updates from allow-listed users; everyone passes when the list is empty."""

    def __init__(self, allowed_users: list[int]):
        super().__init__()
        self.allowed_users = frozenset(allowed_users)

    def check_update(self, update: Update) -> bool:
        if not self.allowed_users:
            return True
        user = update.effective_user
        return user is not None and user.id in self.allowed_users


def agenda_trigger(config: Config) -> CronTrigger | None:
    """Cron trigger for the daily agenda push, or None when it is disabled or invalid."""
    if not config.telegram_agenda_time or not config.telegram_allowed_users:
        return None
    try:
        hour, minute = (int(part) for part in config.telegram_agenda_time.split(":"))
        return CronTrigger(hour=hour, minute=minute, timezone=config.timezone)
    except ValueError:
        logger.warning(f"Invalid TELEGRAM_AGENDA_TIME: {config.telegram_agenda_time!r}, daily agenda disabled")
        return None


def create_application(config: Config | None = None) -> Application:
    """Build the bot: commands, the /add conversation and the daily agenda job."""
    config = config or load_config()
    if not config.telegram_bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN not configured in vertical.conf")

    scheduler = AsyncIOScheduler(timezone=config.timezone)

    async def start_scheduler(application: Application) -> None:
        trigger = agenda_trigger(config)
        if trigger is not None:
            scheduler.add_job(
                send_scheduled_agenda,
                trigger,
                args=[application.bot, config.telegram_allowed_users, config],
                id="daily_agenda",
            )
            logger.info(f"Daily agenda scheduled at {config.telegram_agenda_time} {config.timezone}")
        scheduler.start()

    app = Application.builder().token(config.telegram_bot_token).post_init(start_scheduler).build()
    auth = AuthFilter(config.telegram_allowed_users)

    for name, handler in COMMANDS.items():
        app.add_handler(CommandHandler(name, handler, filters=auth))

    app.add_handler(
        ConversationHandler(
            entry_points=[CommandHandler("add", add_start_handler, filters=auth)],
            states={
                AddEventStates.CONFIRM: [CallbackQueryHandler(add_confirm_handler, pattern="^add_")],
            },
            fallbacks=[CommandHandler("cancel", add_cancel_handler)],
            per_user=True,
        )
    )

    if config.telegram_allowed_users:
        app.add_handler(MessageHandler(~auth & filters.ALL, unauthorized_handler))
    else:
        logger.warning("TELEGRAM_ALLOWED_USERS is empty, the bot answers anyone")

    return app


def run_bot():
    """Run the Telegram bot until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    app = create_application()
    logger.info("Starting Vertical Telegram bot...")
    app.run_polling(allowed_updates=Update.ALL_TYPES)
