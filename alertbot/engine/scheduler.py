"""Scheduler - the once-a-minute pass that delivers and prunes reminders."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from alertbot.bot.formatters import format_notification
from alertbot.bot.gateway import TelegramGateway
from alertbot.db.models import Reminder
from alertbot.db.store import ReminderStore
from alertbot.errors import DeliveryError, PersistenceError
from alertbot.utils.constants import DEFAULT_DELIVERY_TIMEOUT
from alertbot.utils.time_utils import format_local

logger = logging.getLogger(__name__)


class ReminderState(str, Enum):
    """Where a reminder stands relative to now."""

    PENDING = "pending"
    DUE = "due"
    EXPIRED = "expired"


def classify(reminder: Reminder, now: datetime, lead_time: timedelta) -> ReminderState:
    """Classify a reminder.

    DUE once the event is at most lead_time away, EXPIRED once it has
    started, PENDING before that.
    """
    time_until_fire = reminder.fire_at - now
    if time_until_fire <= timedelta(0):
        return ReminderState.EXPIRED
    if time_until_fire <= lead_time:
        return ReminderState.DUE
    return ReminderState.PENDING


@dataclass
class TickReport:
    """What one tick did."""

    delivered: int = 0
    expired: int = 0
    failed: int = 0
    skipped: bool = False


class Scheduler:
    """Reconciles stored reminders against the clock.

    A failed delivery leaves the reminder in place, so it is retried every
    tick until the event starts; after that it expires without being sent.
    """

    def __init__(
        self,
        store: ReminderStore,
        gateway: TelegramGateway,
        lead_time: timedelta,
        delivery_timeout: float = DEFAULT_DELIVERY_TIMEOUT,
    ):
        self.store = store
        self.gateway = gateway
        self.lead_time = lead_time
        self.delivery_timeout = delivery_timeout
        self._tick_lock = asyncio.Lock()

    async def tick(self, now: datetime | None = None) -> TickReport:
        """Run one pass over a snapshot of all reminders.

        Overlapping calls are skipped rather than queued.
        """
        if self._tick_lock.locked():
            logger.warning("Previous tick still running, skipping this one")
            return TickReport(skipped=True)

        async with self._tick_lock:
            if now is None:
                now = datetime.now(timezone.utc)
            report = TickReport()

            reminders = self.store.snapshot()
            logger.debug(f"Tick at {now.isoformat()}: {len(reminders)} reminders pending")

            for key, reminder in reminders.items():
                try:
                    await self._process(key, reminder, now, report)
                except Exception as e:
                    report.failed += 1
                    logger.error(f"Error processing reminder {key}: {e}", exc_info=True)

            if report.delivered or report.expired or report.failed:
                logger.info(
                    f"Tick done: {report.delivered} delivered, {report.expired} expired, "
                    f"{report.failed} failed"
                )
            return report

    async def _process(
        self, key: str, reminder: Reminder, now: datetime, report: TickReport
    ) -> None:
        state = classify(reminder, now, self.lead_time)

        if state is ReminderState.EXPIRED:
            logger.info(
                f"Dropping expired reminder {key}: {reminder.action!r} "
                f"scheduled for {format_local(reminder.fire_at)}"
            )
            self._delete(key)
            report.expired += 1
            return

        if state is ReminderState.PENDING:
            return

        # The snapshot may be stale; never deliver a reminder twice
        if key not in self.store:
            return

        text = format_notification(reminder, now)
        try:
            await self._deliver(reminder, text)
        except DeliveryError as e:
            report.failed += 1
            logger.error(f"Failed to deliver reminder {key}, will retry: {e}")
            return
        except asyncio.TimeoutError:
            report.failed += 1
            logger.error(
                f"Delivery of reminder {key} timed out after {self.delivery_timeout}s, will retry"
            )
            return

        logger.info(f"Delivered reminder {key}: {reminder.action!r} at {format_local(reminder.fire_at)}")
        self._delete(key)
        report.delivered += 1

    async def _deliver(self, reminder: Reminder, text: str) -> None:
        # Topic resolution is bounded by the gateway and must not be cancelled here
        topic_id = await self.gateway.resolve_or_create_topic(reminder.chat_id)
        await asyncio.wait_for(
            self.gateway.send(reminder.chat_id, topic_id, text), self.delivery_timeout
        )

    def _delete(self, key: str) -> None:
        try:
            self.store.delete(key)
        except PersistenceError as e:
            logger.warning(f"Reminder {key} removed but state not saved: {e}")

    def startup_recovery(self, now: datetime | None = None) -> int:
        """Drop reminders whose event passed while the bot was down.

        Returns:
            Number of reminders dropped
        """
        if now is None:
            now = datetime.now(timezone.utc)

        dropped = 0
        for key, reminder in self.store.snapshot().items():
            if classify(reminder, now, self.lead_time) is ReminderState.EXPIRED:
                self._delete(key)
                dropped += 1

        logger.info(
            f"Startup recovery: dropped {dropped} expired reminders, {len(self.store)} pending"
        )
        return dropped
