"""Splitting an incoming message into an action and a date/time fragment."""

from typing import NamedTuple

from alertbot.errors import ParseError
from alertbot.parser.patterns import (
    INLINE_HOUR_PATTERN,
    INLINE_TIME_PATTERN,
    SINGLE_LINE_DATED_PATTERN,
    TOMORROW_FRAGMENT,
)


class SplitMessage(NamedTuple):
    """A message separated into what to do and when."""

    action: str
    fragment: str


def _without(line: str, fragment: str) -> str:
    """Remove the first occurrence of fragment and tidy up the spaces left behind."""
    return " ".join(line.replace(fragment, "", 1).split())


def _split_single_line(line: str) -> SplitMessage:
    """Pull an inline "в HH:MM" or "в H" out of a one-line message."""
    match = INLINE_TIME_PATTERN.search(line)
    if match:
        action = _without(line, match.group(0))
        return SplitMessage(action, f"{match.group(1)}:{match.group(2)}")

    match = INLINE_HOUR_PATTERN.search(line)
    if match:
        action = _without(line, match.group(0))
        return SplitMessage(action, TOMORROW_FRAGMENT.format(hour=match.group(1)))

    raise ParseError(f"no time found in {line!r}")


def split_message(text: str) -> SplitMessage:
    """Split message text into (action, date/time fragment).

    Layouts, tried in order:
    1. "Action DD.MM.YYYY в HH:MM" (the date may also start a new line)
    2. A single line with an inline "в HH:MM", or "в H" meaning tomorrow
    3. Two or more lines: the second-to-last is the action, the last the time

    Raises:
        ParseError: the text has none of these layouts or the action is empty
    """
    text = text.strip()

    match = SINGLE_LINE_DATED_PATTERN.match(text)
    if match:
        action, date, hour, minute = match.groups()
        result = SplitMessage(action.strip(), f"{date} в {hour}:{minute}")
    else:
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if len(lines) == 1:
            result = _split_single_line(lines[0])
        elif len(lines) >= 2:
            result = SplitMessage(lines[-2], lines[-1])
        else:
            raise ParseError("empty message")

    if not result.action:
        raise ParseError(f"no action in {text!r}")
    return result
