"""Tests for splitting messages into action and date/time."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from alertbot.errors import ParseError
from alertbot.parser.datetime_parser import parse_datetime
from alertbot.parser.splitter import SplitMessage, split_message

MSK = ZoneInfo("Europe/Moscow")


def test_two_lines():
    """The first line is the action, the second the time."""
    assert split_message("Буду спать\nзавтра в 9") == SplitMessage("Буду спать", "завтра в 9")


def test_blank_lines_are_ignored():
    """Blank lines and surrounding whitespace do not count."""
    text = "\n\n  Купить хлеб \n\n   12.05 18:00  \n\n"

    assert split_message(text) == SplitMessage("Купить хлеб", "12.05 18:00")


def test_last_two_lines_are_used():
    """With more lines, only the last two matter."""
    text = "Список дел\nЗабрать посылку\nв 10:00"

    assert split_message(text) == SplitMessage("Забрать посылку", "в 10:00")


def test_single_line_with_full_date():
    """Action and full date on one line."""
    text = "Сходить к врачу 13.03.2025 в 21.04"

    assert split_message(text) == SplitMessage("Сходить к врачу", "13.03.2025 в 21:04")


def test_full_date_on_next_line():
    """The full date may also start the next line."""
    text = "Сходить к врачу\n13.03.2025 в 21:04"

    assert split_message(text) == SplitMessage("Сходить к врачу", "13.03.2025 в 21:04")


def test_single_line_with_time():
    """An inline time is cut out of the action."""
    assert split_message("Позвонить маме в 18:30") == SplitMessage("Позвонить маме", "18:30")
    assert split_message("Позвонить в 18.30 маме") == SplitMessage("Позвонить маме", "18:30")


def test_single_line_with_hour_means_tomorrow():
    """An inline hour without minutes becomes tomorrow at that hour."""
    assert split_message("Позвонить маме в 9") == SplitMessage("Позвонить маме", "Завтра в 9")


@pytest.mark.parametrize("text", ["", "   \n \n", "Просто текст без времени", "в 9", "в 10:30"])
def test_unsplittable(text):
    """No time, no action or no text at all."""
    with pytest.raises(ParseError):
        split_message(text)


def test_split_then_parse():
    """A split fragment parses to the expected time."""
    now = datetime(2025, 6, 1, 22, 0, tzinfo=MSK)

    split = split_message("Буду спать\nзавтра в 9")

    assert parse_datetime(split.fragment, MSK, now) == datetime(2025, 6, 2, 9, 0, tzinfo=MSK)


def test_single_line_hour_parses_as_tomorrow():
    """The synthesized fragment resolves to tomorrow."""
    now = datetime(2025, 6, 1, 6, 0, tzinfo=MSK)

    split = split_message("Позвонить маме в 9")

    assert parse_datetime(split.fragment, MSK, now) == datetime(2025, 6, 2, 9, 0, tzinfo=MSK)
