"""Main entry point for the reminder bot."""

import logging
import sys

from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from alertbot.bot.gateway import TelegramGateway
from alertbot.bot.handlers import handle_plain_text, help_command, start_command
from alertbot.config import Config
from alertbot.db.store import ReminderStore
from alertbot.engine.scheduler import Scheduler
from alertbot.errors import CorruptStateError
from alertbot.utils.constants import TICK_INTERVAL_SECONDS
from alertbot.utils.error_handler import error_handler
from alertbot.utils.time_utils import resolve_timezone, seconds_until_next_minute

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    stream=sys.stdout,
)
# Keep request logs (which include the bot token) out of normal output
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def tick_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Job callback for the scheduler tick."""
    scheduler: Scheduler = context.bot_data["scheduler"]
    await scheduler.tick()


def build_post_init(store: ReminderStore):
    """Create the post_init hook wiring the store into the application."""

    async def post_init(application: Application) -> None:
        tz = resolve_timezone(Config.TIMEZONE)
        gateway = TelegramGateway(application.bot, store, timeout=Config.DELIVERY_TIMEOUT)
        scheduler = Scheduler(
            store,
            gateway,
            lead_time=Config.lead_time(),
            delivery_timeout=Config.DELIVERY_TIMEOUT,
        )

        application.bot_data.update(
            store=store,
            gateway=gateway,
            scheduler=scheduler,
            tz=tz,
            lead_minutes=Config.REMINDER_MINUTES,
        )

        scheduler.startup_recovery()

        job_queue = application.job_queue
        if job_queue is None:
            raise RuntimeError("JobQueue unavailable, install python-telegram-bot[job-queue]")

        job_queue.run_repeating(
            tick_job,
            interval=TICK_INTERVAL_SECONDS,
            first=seconds_until_next_minute(),
            name="reminder_tick",
            job_kwargs={"max_instances": 1, "coalesce": True},
        )
        logger.info(
            f"Reminder tick scheduled every {TICK_INTERVAL_SECONDS}s, "
            f"lead time {Config.REMINDER_MINUTES} min, timezone {tz}"
        )

    return post_init


async def post_shutdown(application: Application) -> None:
    """Log shutdown; the state file is already consistent."""
    store: ReminderStore | None = application.bot_data.get("store")
    if store is not None:
        logger.info(f"Shutting down with {len(store)} pending reminders")

    logger.info("Reminder bot shut down")


def main() -> None:
    """Start the bot."""
    # Validate configuration
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    # Refuse to start on a state file we cannot read
    try:
        store = ReminderStore.load(Config.STATE_FILE)
    except CorruptStateError as e:
        logger.error(f"Failed to load state: {e}")
        sys.exit(1)

    application = (
        Application.builder()
        .token(Config.TELEGRAM_BOT_TOKEN)
        .post_init(build_post_init(store))
        .post_shutdown(post_shutdown)
        .build()
    )

    # Commands
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))

    # Plain text handler (must be last)
    application.add_handler(
        MessageHandler(filters.TEXT & ~filters.COMMAND, handle_plain_text)
    )

    # Error handler
    application.add_error_handler(error_handler)

    logger.info("Starting reminder bot...")
    application.run_polling(allowed_updates=["message"])


if __name__ == "__main__":
    main()
