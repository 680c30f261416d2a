"""Delivery gateway - sends messages into a chat's reminder topic."""

import asyncio
import logging
from typing import Any

from telegram import Bot
from telegram.error import TelegramError

from alertbot.db.store import ReminderStore
from alertbot.errors import DeliveryError, PersistenceError
from alertbot.utils.constants import (
    DEFAULT_DELIVERY_TIMEOUT,
    GENERAL_TOPIC_ID,
    REMINDER_TOPIC_NAME,
)

logger = logging.getLogger(__name__)


class TelegramGateway:
    """Resolves the reminder topic of a chat and posts messages into it.

    Topic ids are cached in the store, so each chat is looked up or gets a
    topic created at most once. Resolution runs under a lock and keeps going
    after the caller gives up waiting, so a topic Telegram already created is
    always cached before anyone looks again.
    """

    def __init__(self, bot: Bot, store: ReminderStore, timeout: float = DEFAULT_DELIVERY_TIMEOUT):
        self.bot = bot
        self.store = store
        self.timeout = timeout
        self._topic_lock = asyncio.Lock()
        self._resolving: set[asyncio.Task] = set()

    def _timeouts(self) -> dict[str, float]:
        return {
            "read_timeout": self.timeout,
            "write_timeout": self.timeout,
            "connect_timeout": self.timeout,
            "pool_timeout": self.timeout,
        }

    async def resolve_or_create_topic(self, chat_id: int) -> int:
        """Get the id of the chat's reminder topic, creating it if needed.

        Private chats have no topics and use the main thread.

        Raises:
            DeliveryError: the topic could not be found nor created in time
        """
        topic_id = self.store.get_topic(chat_id)
        if topic_id is not None:
            return topic_id

        if chat_id > 0:
            return GENERAL_TOPIC_ID

        task = asyncio.ensure_future(self._resolve_uncached(chat_id))
        self._resolving.add(task)
        task.add_done_callback(self._forget)
        try:
            return await asyncio.wait_for(asyncio.shield(task), self.timeout)
        except asyncio.TimeoutError as e:
            raise DeliveryError(
                f"resolving reminder topic in chat {chat_id} timed out after {self.timeout}s"
            ) from e

    async def _resolve_uncached(self, chat_id: int) -> int:
        async with self._topic_lock:
            topic_id = self.store.get_topic(chat_id)
            if topic_id is not None:
                return topic_id

            topic_id = await self._find_topic(chat_id)
            if topic_id is None:
                topic_id = await self._create_topic(chat_id)

            try:
                self.store.set_topic(chat_id, topic_id)
            except PersistenceError as e:
                logger.warning(f"Failed to save topic {topic_id} for chat {chat_id}: {e}")
            return topic_id

    def _forget(self, task: asyncio.Task) -> None:
        self._resolving.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Topic resolution finished with error: {task.exception()}")

    async def _find_topic(self, chat_id: int) -> int | None:
        """Look for an existing topic with the reminder topic name."""
        try:
            result: Any = await self.bot.do_api_request(
                "getForumTopicsByChat",
                api_kwargs={"chat_id": chat_id},
                **self._timeouts(),
            )
        except TelegramError as e:
            logger.debug(f"Topic lookup unavailable for chat {chat_id}: {e}")
            return None

        if not isinstance(result, list):
            return None
        for topic in result:
            if not isinstance(topic, dict) or topic.get("name") != REMINDER_TOPIC_NAME:
                continue
            topic_id = topic.get("message_thread_id")
            if isinstance(topic_id, int):
                logger.info(f"Found reminder topic {topic_id} in chat {chat_id}")
                return topic_id
        return None

    async def _create_topic(self, chat_id: int) -> int:
        try:
            topic = await self.bot.create_forum_topic(
                chat_id=chat_id,
                name=REMINDER_TOPIC_NAME,
                **self._timeouts(),
            )
        except TelegramError as e:
            raise DeliveryError(f"failed to create reminder topic in chat {chat_id}: {e}") from e

        logger.info(f"Created reminder topic {topic.message_thread_id} in chat {chat_id}")
        return topic.message_thread_id

    async def send(self, chat_id: int, topic_id: int, text: str) -> None:
        """Send plain text into a topic of a chat.

        Raises:
            DeliveryError: Telegram rejected the message or the request failed
        """
        try:
            await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                message_thread_id=topic_id or None,
                **self._timeouts(),
            )
        except TelegramError as e:
            raise DeliveryError(f"failed to send message to chat {chat_id}: {e}") from e

    async def send_to_reminder_topic(self, chat_id: int, text: str) -> None:
        """Resolve the chat's reminder topic and send text into it."""
        topic_id = await self.resolve_or_create_topic(chat_id)
        await self.send(chat_id, topic_id, text)
