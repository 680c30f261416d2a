"""Regex patterns for reminder messages."""

import re

# Date/time fragments, in the order the parser tries them

# 13.03.2025 в 21:04, 13.03.2025 в 21.04
EXPLICIT_DATE_PATTERN = re.compile(r'(\d{2})\.(\d{2})\.(\d{4})\s+в\s+(\d{1,2})[:.](\d{2})')

# 13.03 21:04
DAY_MONTH_PATTERN = re.compile(r'(\d{2})\.(\d{2})\s+(\d{2}):(\d{2})')

# Завтра в 9
TOMORROW_PATTERN = re.compile(r'завтра\s+в\s+(\d{1,2})', re.IGNORECASE)

# в 21:04, в 9.30
TIME_TODAY_PATTERN = re.compile(r'в\s+(\d{1,2})[:.](\d{2})', re.IGNORECASE)

# в 9
HOUR_TODAY_PATTERN = re.compile(r'в\s+(\d{1,2})', re.IGNORECASE)

# 21:04 as the whole fragment
BARE_TIME_PATTERN = re.compile(r'^(\d{1,2})[:.](\d{2})$')

# Message layouts

# Сходить в магазин 13.03.2025 в 21:04
SINGLE_LINE_DATED_PATTERN = re.compile(
    r'^(.+?)\s+(\d{2}\.\d{2}\.\d{4})\s+в\s+(\d{1,2})[:.](\d{2})'
)

# Time inside a one-line message (case-sensitive, unlike the fragment patterns)
INLINE_TIME_PATTERN = re.compile(r'в\s+(\d{1,2})[:.](\d{2})')
INLINE_HOUR_PATTERN = re.compile(r'в\s+(\d{1,2})')

# Fragment synthesized for an hour-only one-line message
TOMORROW_FRAGMENT = "Завтра в {hour}"
