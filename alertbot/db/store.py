"""Reminder store - in-memory state with a JSON snapshot on disk."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from alertbot.db.models import Reminder
from alertbot.errors import CorruptStateError, PersistenceError
from alertbot.utils.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class ReminderStore:
    """Pending reminders and per-chat reminder topics.

    Every mutation is written through to the snapshot file before the call
    returns. The file is replaced atomically, so it always holds the state
    after the last completed mutation.
    """

    def __init__(self, path: Path):
        self.path = path
        self._lock = ReadWriteLock()
        self._reminders: dict[str, Reminder] = {}
        self._topics: dict[int, int] = {}

    @classmethod
    def load(cls, path: Path) -> "ReminderStore":
        """Open the store at path, reading the snapshot if there is one.

        Raises:
            CorruptStateError: the file exists but cannot be read or decoded
        """
        store = cls(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"No state file at {path}, starting empty")
            return store
        except OSError as e:
            raise CorruptStateError(f"cannot read state file {path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStateError(f"state file {path} is not valid JSON: {e}") from e

        store._restore(data)
        logger.info(
            f"Loaded {len(store._reminders)} reminders and "
            f"{len(store._topics)} topics from {path}"
        )
        return store

    def _restore(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise CorruptStateError(f"state file {self.path} must hold a JSON object")

        # Older snapshots may carry null instead of an empty map
        topics = data.get("reminder_topics") or {}
        reminders = data.get("reminders") or {}
        if not isinstance(topics, dict) or not isinstance(reminders, dict):
            raise CorruptStateError(f"state file {self.path} has malformed sections")

        try:
            for chat_id, topic_id in topics.items():
                if isinstance(topic_id, bool) or not isinstance(topic_id, int):
                    raise ValueError(f"topic id must be an integer, got {topic_id!r}")
                self._topics[int(chat_id)] = topic_id
            for key, entry in reminders.items():
                if not isinstance(entry, dict):
                    raise ValueError(f"reminder must be an object, got {entry!r}")
                self._reminders[key] = Reminder.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptStateError(f"state file {self.path} is malformed: {e}") from e

    # Reminder operations

    def add(self, key: str, reminder: Reminder) -> None:
        """Insert or replace the reminder at key.

        Raises:
            PersistenceError: the snapshot write failed (the reminder is kept)
        """
        with self._lock.write():
            self._reminders[key] = reminder
            self._save()

    def get(self, key: str) -> Reminder | None:
        """Get a reminder by key."""
        with self._lock.read():
            return self._reminders.get(key)

    def delete(self, key: str) -> None:
        """Delete a reminder. Deleting a missing key does nothing.

        Raises:
            PersistenceError: the snapshot write failed (the reminder is gone)
        """
        with self._lock.write():
            if self._reminders.pop(key, None) is None:
                return
            self._save()

    def snapshot(self) -> dict[str, Reminder]:
        """Copy of all reminders, ordered by fire time."""
        with self._lock.read():
            items = sorted(self._reminders.items(), key=lambda kv: (kv[1].fire_at, kv[0]))
        return dict(items)

    def __contains__(self, key: object) -> bool:
        with self._lock.read():
            return key in self._reminders

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._reminders)

    # Topic operations

    def get_topic(self, chat_id: int) -> int | None:
        """Get the cached reminder topic of a chat."""
        with self._lock.read():
            return self._topics.get(chat_id)

    def set_topic(self, chat_id: int, topic_id: int) -> None:
        """Cache the reminder topic of a chat.

        Raises:
            PersistenceError: the snapshot write failed (the mapping is kept)
        """
        with self._lock.write():
            self._topics[chat_id] = topic_id
            self._save()

    # Persistence

    def _serialize(self) -> str:
        data = {
            "reminder_topics": {str(chat_id): topic for chat_id, topic in self._topics.items()},
            "reminders": {key: r.to_dict() for key, r in self._reminders.items()},
        }
        return json.dumps(data, ensure_ascii=False, indent=2)

    def _save(self) -> None:
        """Write the snapshot; caller holds the write lock.

        Runs synchronously, on the event loop when called from handlers or
        the scheduler, so a slow disk delays them until the write returns.
        """
        content = self._serialize()
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceError(f"cannot write state file {self.path}: {e}") from e
