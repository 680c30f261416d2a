"""Message text formatters."""

from datetime import datetime, tzinfo

from alertbot.db.models import Reminder
from alertbot.utils.time_utils import format_local, minutes_left


def format_notification(reminder: Reminder, now: datetime) -> str:
    """Format the notification sent shortly before a reminder fires."""
    minutes = minutes_left(reminder.fire_at - now)
    return f"🔔 Напоминание: через {minutes} минут - {reminder.action}"


def format_confirmation(reminder: Reminder, tz: tzinfo | None = None) -> str:
    """Format the reply confirming a scheduled reminder."""
    return (
        f"✅ Запланировано: {reminder.action}\n"
        f"Дата и время: {format_local(reminder.fire_at, tz)}"
    )


def format_welcome_message() -> str:
    """Format the welcome message for /start."""
    return """
👋 Привет! Я бот для напоминаний. Отправь мне сообщение в формате:

Действие
ДД.ММ.ГГГГ в ЧЧ:ММ

Например:
Позвонить маме
13.03.2025 в 21:04
""".strip()


def format_help_message(lead_minutes: int) -> str:
    """Format the help message."""
    return f"""
📝 Поддерживаемые форматы даты:

1. ДД.ММ.ГГГГ в ЧЧ:ММ
2. ДД.ММ ЧЧ:ММ
3. Завтра в Ч (только целый час, минуты не учитываются)
4. в ЧЧ:ММ (сегодня/завтра)
5. в Ч (сегодня/завтра)
6. ЧЧ:ММ (сегодня/завтра)

Напоминание придёт за {lead_minutes} минут до события.
""".strip()
