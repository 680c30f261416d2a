"""Data models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from alertbot.utils.time_utils import from_rfc3339, to_rfc3339


def reminder_key(chat_id: int, message_id: int) -> str:
    """Store key of a reminder; the format is shared with existing snapshots."""
    return f"{chat_id}_{message_id}"


@dataclass(frozen=True)
class Reminder:
    """A scheduled action tied to the message that created it."""

    action: str
    fire_at: datetime  # aware, in the configured timezone
    chat_id: int
    message_id: int
    thread_id: int = 0

    @property
    def key(self) -> str:
        return reminder_key(self.chat_id, self.message_id)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot representation."""
        return {
            "action": self.action,
            "date_time": to_rfc3339(self.fire_at),
            "chat_id": self.chat_id,
            "message_id": self.message_id,
            "thread_id": self.thread_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reminder":
        """Build a reminder from its snapshot representation.

        Raises:
            KeyError: a required field is missing
            ValueError: a field has the wrong type or format
        """
        action = data["action"]
        if not isinstance(action, str):
            raise ValueError(f"action must be a string, got {action!r}")
        return cls(
            action=action,
            fire_at=from_rfc3339(data["date_time"]),
            chat_id=_as_int(data["chat_id"]),
            message_id=_as_int(data["message_id"]),
            thread_id=_as_int(data.get("thread_id") or 0),
        )


def _as_int(value: Any) -> int:
    # bool is an int subclass but never a valid id
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    return value
