"""Tests for update handlers."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest

from alertbot.bot.handlers import handle_plain_text, help_command, start_command
from alertbot.db.store import ReminderStore
from alertbot.errors import DeliveryError, PersistenceError

MSK = ZoneInfo("Europe/Moscow")


def make_update(text: str, chat_id: int = -1001, message_id: int = 42) -> MagicMock:
    update = MagicMock()
    update.message.text = text
    update.message.chat_id = chat_id
    update.message.message_id = message_id
    update.message.message_thread_id = None
    update.message.chat.type = "supergroup"
    update.effective_chat.id = chat_id
    return update


@pytest.fixture
def store(tmp_path):
    return ReminderStore.load(tmp_path / "state.json")


@pytest.fixture
def context(store):
    context = MagicMock()
    context.bot_data = {
        "store": store,
        "gateway": AsyncMock(),
        "tz": MSK,
        "lead_minutes": 10,
    }
    return context


@pytest.mark.asyncio
async def test_reminder_is_scheduled_and_confirmed(store, context):
    """A well-formed message is stored and confirmed in the reminder topic."""
    update = make_update("Сходить к врачу\n13.03.2030 в 21:04")

    await handle_plain_text(update, context)

    reminder = store.get("-1001_42")
    assert reminder.action == "Сходить к врачу"
    assert reminder.fire_at == datetime(2030, 3, 13, 21, 4, tzinfo=MSK)
    assert reminder.thread_id == 0
    context.bot_data["gateway"].send_to_reminder_topic.assert_awaited_once_with(
        -1001, "✅ Запланировано: Сходить к врачу\nДата и время: 21:04 13.03.2030"
    )


@pytest.mark.asyncio
async def test_unparseable_message_is_ignored(store, context):
    """Chatter gets no reply and creates nothing."""
    await handle_plain_text(make_update("Всем привет!"), context)

    assert len(store) == 0
    context.bot_data["gateway"].send_to_reminder_topic.assert_not_awaited()


@pytest.mark.asyncio
async def test_persistence_failure_still_confirms(context):
    """Losing durability does not lose the user's confirmation."""
    store = MagicMock(spec=ReminderStore)
    store.add.side_effect = PersistenceError("disk full")
    context.bot_data["store"] = store

    await handle_plain_text(make_update("Сходить к врачу\n13.03.2030 в 21:04"), context)

    store.add.assert_called_once()
    context.bot_data["gateway"].send_to_reminder_topic.assert_awaited_once()


@pytest.mark.asyncio
async def test_confirmation_failure_keeps_reminder(store, context):
    """A reminder stays scheduled even if the confirmation cannot be sent."""
    context.bot_data["gateway"].send_to_reminder_topic.side_effect = DeliveryError("offline")

    await handle_plain_text(make_update("Сходить к врачу\n13.03.2030 в 21:04"), context)

    assert "-1001_42" in store


@pytest.mark.asyncio
async def test_start_command(context):
    """The welcome text goes to the reminder topic."""
    await start_command(make_update("/start"), context)

    chat_id, text = context.bot_data["gateway"].send_to_reminder_topic.await_args.args
    assert chat_id == -1001
    assert "Привет" in text


@pytest.mark.asyncio
async def test_help_command(context):
    """Help lists the formats and the lead time."""
    await help_command(make_update("/help"), context)

    _, text = context.bot_data["gateway"].send_to_reminder_topic.await_args.args
    assert "ДД.ММ.ГГГГ в ЧЧ:ММ" in text
    assert "за 10 минут" in text
    assert "только целый час" in text
