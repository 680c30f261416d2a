"""Time and timezone utilities."""

import logging
import math
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.parser import isoparse
from dateutil.tz import tzlocal

from alertbot.utils.constants import DISPLAY_FORMAT

logger = logging.getLogger(__name__)


def host_timezone() -> tzinfo:
    """Return the timezone the host is configured with, DST rules included."""
    return tzlocal()


def resolve_timezone(name: str) -> tzinfo:
    """Resolve a named timezone, falling back to the host's local one.

    An empty, malformed or unknown name is not an error: reminders are still
    scheduled, just against the host clock.
    """
    if not name:
        logger.warning(f"No timezone configured, using host timezone {host_timezone()}")
        return host_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        local = host_timezone()
        logger.warning(f"Unknown timezone {name!r} ({e}), using host timezone {local}")
        return local


def to_rfc3339(dt: datetime) -> str:
    """Format an aware datetime as an RFC 3339 timestamp."""
    if dt.tzinfo is None:
        raise ValueError("naive datetime cannot be serialized")
    return dt.replace(microsecond=0).isoformat()


def from_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Raises:
        ValueError: the string is not a timestamp or carries no UTC offset
    """
    dt = isoparse(value)
    if dt.tzinfo is None:
        raise ValueError(f"timestamp without offset: {value!r}")
    return dt


def format_local(dt: datetime, tz: tzinfo | None = None) -> str:
    """Format a datetime for users, e.g. "21:04 13.03.2025"."""
    if tz is not None:
        dt = dt.astimezone(tz)
    return dt.strftime(DISPLAY_FORMAT)


def minutes_left(delta: timedelta) -> int:
    """Whole minutes left in a positive interval, rounded up, at least 1."""
    return max(1, math.ceil(delta.total_seconds() / 60))


def seconds_until_next_minute(now: datetime | None = None) -> float:
    """Seconds until the next wall-clock minute boundary.

    Used to align the first scheduler tick with the start of a minute.
    """
    if now is None:
        now = datetime.now()
    return 60 - now.second - now.microsecond / 1_000_000
