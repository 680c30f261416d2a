"""Global error handler for the bot."""

import logging
import traceback

from telegram import Update
from telegram.ext import ContextTypes

logger = logging.getLogger(__name__)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log errors raised while handling updates.

    Users are never told about failures; a message that could not be
    handled simply gets no confirmation.
    """
    error = context.error
    if error is None:
        return

    tb_string = "".join(traceback.format_exception(None, error, error.__traceback__))

    if isinstance(update, Update) and update.effective_chat:
        logger.error(f"Exception while handling an update in chat {update.effective_chat.id}:\n{tb_string}")
    else:
        logger.error(f"Exception while handling an update:\n{tb_string}")
