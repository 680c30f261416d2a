"""Update handlers."""

import logging
from datetime import tzinfo

from telegram import Update
from telegram.ext import ContextTypes

from alertbot.bot.formatters import (
    format_confirmation,
    format_help_message,
    format_welcome_message,
)
from alertbot.bot.gateway import TelegramGateway
from alertbot.db.models import Reminder
from alertbot.db.store import ReminderStore
from alertbot.errors import DeliveryError, ParseError, PersistenceError
from alertbot.parser.datetime_parser import parse_datetime
from alertbot.parser.splitter import split_message

logger = logging.getLogger(__name__)


async def _reply_in_topic(context: ContextTypes.DEFAULT_TYPE, chat_id: int, text: str) -> None:
    gateway: TelegramGateway = context.bot_data["gateway"]
    try:
        await gateway.send_to_reminder_topic(chat_id, text)
    except DeliveryError as e:
        logger.error(f"Failed to reply in chat {chat_id}: {e}")


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    if not update.effective_chat:
        return

    await _reply_in_topic(context, update.effective_chat.id, format_welcome_message())


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    if not update.effective_chat:
        return

    lead_minutes: int = context.bot_data["lead_minutes"]
    await _reply_in_topic(context, update.effective_chat.id, format_help_message(lead_minutes))


async def handle_plain_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages as reminders.

    Messages that do not parse are ignored without a reply.
    """
    message = update.message
    if not message or not message.text:
        return

    chat_id = message.chat_id
    logger.info(f"Received message {message.message_id} in chat {chat_id} ({message.chat.type})")

    store: ReminderStore = context.bot_data["store"]
    tz: tzinfo = context.bot_data["tz"]

    try:
        split = split_message(message.text)
        fire_at = parse_datetime(split.fragment, tz)
    except ParseError as e:
        logger.info(f"Ignoring message {message.message_id} in chat {chat_id}: {e}")
        return

    reminder = Reminder(
        action=split.action,
        fire_at=fire_at,
        chat_id=chat_id,
        message_id=message.message_id,
        thread_id=message.message_thread_id or 0,
    )

    try:
        store.add(reminder.key, reminder)
    except PersistenceError as e:
        logger.warning(f"Reminder {reminder.key} scheduled but not saved: {e}")

    logger.info(f"Scheduled reminder {reminder.key}: {reminder.action!r} at {fire_at.isoformat()}")

    await _reply_in_topic(context, chat_id, format_confirmation(reminder, tz))
