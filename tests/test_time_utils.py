"""Tests for time utilities."""

import os
import time
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from alertbot.parser.datetime_parser import parse_datetime
from alertbot.utils.time_utils import (
    format_local,
    from_rfc3339,
    host_timezone,
    minutes_left,
    resolve_timezone,
    seconds_until_next_minute,
    to_rfc3339,
)


def test_resolve_timezone():
    """Known names resolve to that zone."""
    assert resolve_timezone("Europe/Moscow") == ZoneInfo("Europe/Moscow")


@pytest.mark.parametrize("name", ["Mars/Olympus_Mons", "", "../etc/passwd"])
def test_resolve_timezone_fallback(name):
    """Unknown names fall back to the host timezone."""
    assert resolve_timezone(name) == host_timezone()


@pytest.fixture
def new_york_host():
    """Run with the host clock set to US Eastern time."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "EST+05EDT,M3.2.0,M11.1.0"
    time.tzset()
    yield
    if previous is None:
        del os.environ["TZ"]
    else:
        os.environ["TZ"] = previous
    time.tzset()


def test_host_fallback_follows_dst(new_york_host):
    """A date past the DST switch keeps its wall-clock hour in the fallback zone."""
    tz = resolve_timezone("Not/AZone")
    now = datetime(2026, 10, 18, 12, 0, tzinfo=ZoneInfo("America/New_York"))

    value = parse_datetime("15.01 10:00", tz, now)

    assert value.hour == 10
    assert value.utcoffset() == timedelta(hours=-5)
    assert value == datetime(2027, 1, 15, 10, 0, tzinfo=ZoneInfo("America/New_York"))


def test_to_rfc3339():
    """Timestamps carry their UTC offset."""
    dt = datetime(2025, 3, 13, 21, 4, 30, 123456, tzinfo=ZoneInfo("Europe/Moscow"))

    assert to_rfc3339(dt) == "2025-03-13T21:04:30+03:00"


def test_to_rfc3339_rejects_naive():
    """Naive datetimes have no meaningful offset."""
    with pytest.raises(ValueError):
        to_rfc3339(datetime(2025, 3, 13, 21, 4))


def test_from_rfc3339():
    """Offsets and the Z suffix are both understood."""
    assert from_rfc3339("2025-03-13T21:04:00+03:00") == datetime(
        2025, 3, 13, 18, 4, tzinfo=timezone.utc
    )
    assert from_rfc3339("2025-03-13T18:04:00Z") == datetime(
        2025, 3, 13, 18, 4, tzinfo=timezone.utc
    )


def test_from_rfc3339_requires_offset():
    """A timestamp without offset is ambiguous."""
    with pytest.raises(ValueError):
        from_rfc3339("2025-03-13T21:04:00")


def test_format_local():
    """User-facing format is time first, then date."""
    dt = datetime(2025, 3, 13, 18, 4, tzinfo=timezone.utc)

    assert format_local(dt, ZoneInfo("Europe/Moscow")) == "21:04 13.03.2025"


def test_minutes_left():
    """Partial minutes round up, never below one."""
    assert minutes_left(timedelta(minutes=10)) == 10
    assert minutes_left(timedelta(minutes=9, seconds=1)) == 10
    assert minutes_left(timedelta(seconds=5)) == 1


def test_seconds_until_next_minute():
    """The first tick lands on a minute boundary."""
    assert seconds_until_next_minute(datetime(2025, 1, 1, 12, 0, 45)) == 15
    assert seconds_until_next_minute(datetime(2025, 1, 1, 12, 0, 0)) == 60
