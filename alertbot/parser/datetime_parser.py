"""Date/time fragment parsing.

A fragment such as "13.03.2025 в 21:04" or "в 9" is matched against an
ordered list of matchers. Order matters: the permissive hour-only matchers
would otherwise swallow fully dated fragments. Matchers for fragments that
name no date roll a past result forward to the next occurrence.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from typing import Callable

from dateutil.relativedelta import relativedelta

from alertbot.errors import ParseError
from alertbot.parser.patterns import (
    BARE_TIME_PATTERN,
    DAY_MONTH_PATTERN,
    EXPLICIT_DATE_PATTERN,
    HOUR_TODAY_PATTERN,
    TIME_TODAY_PATTERN,
    TOMORROW_PATTERN,
)

logger = logging.getLogger(__name__)


class MatcherKind(str, Enum):
    """Kinds of date/time fragments, in precedence order."""

    EXPLICIT_DATE = "explicit_date"
    DAY_MONTH = "day_month"
    TOMORROW_AT = "tomorrow_at"
    TIME_TODAY = "time_today"
    HOUR_TODAY = "hour_today"
    BARE_TIME = "bare_time"


@dataclass(frozen=True)
class ParsedDateTime:
    """A successfully parsed fragment."""

    kind: MatcherKind
    value: datetime


def _at(now: datetime, hour: int, minute: int, days: int = 0) -> datetime | None:
    """Local wall-clock time on now's date (shifted by days), or None if invalid."""
    day = now.date() + timedelta(days=days)
    try:
        return datetime(day.year, day.month, day.day, hour, minute, tzinfo=now.tzinfo)
    except ValueError:
        return None


def _roll_day(dt: datetime | None, now: datetime) -> datetime | None:
    """Move a time that already passed today to tomorrow."""
    if dt is not None and dt < now:
        return dt + timedelta(days=1)
    return dt


def explicit_date(match: re.Match, now: datetime) -> datetime | None:
    """DD.MM.YYYY в HH:MM, taken as-is even if in the past."""
    day, month, year, hour, minute = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, hour, minute, tzinfo=now.tzinfo)
    except ValueError:
        return None


def day_month(match: re.Match, now: datetime) -> datetime | None:
    """DD.MM HH:MM in the current year, or the next one if already past."""
    day, month, hour, minute = (int(g) for g in match.groups())
    try:
        dt = datetime(now.year, month, day, hour, minute, tzinfo=now.tzinfo)
    except ValueError:
        return None
    if dt < now:
        dt += relativedelta(years=1)
    return dt


def tomorrow_at(match: re.Match, now: datetime) -> datetime | None:
    """Завтра в H: tomorrow at the full hour."""
    return _at(now, int(match.group(1)), 0, days=1)


def time_today(match: re.Match, now: datetime) -> datetime | None:
    """в HH:MM: today, or tomorrow if that time has passed."""
    return _roll_day(_at(now, int(match.group(1)), int(match.group(2))), now)


def hour_today(match: re.Match, now: datetime) -> datetime | None:
    """в H: today at the full hour, or tomorrow if it has passed."""
    return _roll_day(_at(now, int(match.group(1)), 0), now)


@dataclass(frozen=True)
class DateTimeMatcher:
    """One fragment shape: a regex plus a builder turning its match into a time."""

    kind: MatcherKind
    pattern: re.Pattern
    build: Callable[[re.Match, datetime], datetime | None]

    def match(self, text: str, now: datetime) -> datetime | None:
        found = self.pattern.search(text)
        if not found:
            return None
        return self.build(found, now)


MATCHERS: tuple[DateTimeMatcher, ...] = (
    DateTimeMatcher(MatcherKind.EXPLICIT_DATE, EXPLICIT_DATE_PATTERN, explicit_date),
    DateTimeMatcher(MatcherKind.DAY_MONTH, DAY_MONTH_PATTERN, day_month),
    DateTimeMatcher(MatcherKind.TOMORROW_AT, TOMORROW_PATTERN, tomorrow_at),
    DateTimeMatcher(MatcherKind.TIME_TODAY, TIME_TODAY_PATTERN, time_today),
    DateTimeMatcher(MatcherKind.HOUR_TODAY, HOUR_TODAY_PATTERN, hour_today),
    # Same builder as TIME_TODAY, but the fragment must be nothing else
    DateTimeMatcher(MatcherKind.BARE_TIME, BARE_TIME_PATTERN, time_today),
)


def match_datetime(text: str, now: datetime) -> ParsedDateTime | None:
    """Try every matcher in order and return the first usable result.

    Args:
        text: Date/time fragment
        now: Reference time, aware, in the zone results should carry

    Returns:
        The matched kind and timestamp, or None if no matcher applies
    """
    text = text.strip()
    for matcher in MATCHERS:
        value = matcher.match(text, now)
        if value is not None:
            return ParsedDateTime(matcher.kind, value)
    return None


def parse_datetime(text: str, tz: tzinfo, now: datetime | None = None) -> datetime:
    """Parse a date/time fragment into an absolute time in tz.

    Raises:
        ParseError: no matcher recognizes the fragment
    """
    if now is None:
        now = datetime.now(tz)
    else:
        now = now.astimezone(tz)

    parsed = match_datetime(text, now)
    if parsed is None:
        raise ParseError(f"unrecognized date/time: {text!r}")

    logger.debug(f"Parsed {text!r} as {parsed.kind.value}: {parsed.value.isoformat()}")
    return parsed.value
