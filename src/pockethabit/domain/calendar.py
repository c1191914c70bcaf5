"""Local calendar arithmetic on ``YYYY-MM-DD`` strings.

Every function here is total: malformed input never raises. Dates are handled
as plain year/month/day values (``datetime.date``), never as instants, so no
timezone conversion can shift a day.

Fallbacks for malformed input:

- ``parse_local_date`` -> ``None``
- ``day_of_week`` -> ``-1`` (matches no weekday)
- ``day_of_month`` / ``days_in_month`` -> ``0``
- ``previous_date`` / ``next_date`` / ``add_days`` -> the input unchanged
- ``iso_week_key`` / ``previous_week_key`` / ``week_start`` -> ``""``
- ``dates_in_week`` -> ``[]``
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta
from typing import Optional

_YMD_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_WEEK_KEY_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def format_local_date(year: int, month: int, day: int) -> str:
    """Return a zero-padded ``YYYY-MM-DD`` string."""

    return f"{year:04d}-{month:02d}-{day:02d}"


def to_ymd(value: date) -> str:
    return format_local_date(value.year, value.month, value.day)


def today_ymd() -> str:
    """Today's date in the device's local calendar."""

    return to_ymd(date.today())


def parse_local_date(date_str: object) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` string, returning ``None`` when malformed."""

    if not isinstance(date_str, str):
        return None
    match = _YMD_RE.match(date_str)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_valid_date(date_str: object) -> bool:
    return parse_local_date(date_str) is not None


def day_of_week(date_str: str) -> int:
    """Weekday with 0=Sunday .. 6=Saturday."""

    parsed = parse_local_date(date_str)
    if parsed is None:
        return -1
    # isoweekday: Monday=1 .. Sunday=7
    return parsed.isoweekday() % 7


def day_of_month(date_str: str) -> int:
    parsed = parse_local_date(date_str)
    return parsed.day if parsed is not None else 0


def days_in_month(date_str: str) -> int:
    """Number of days in the month ``date_str`` falls in (28..31)."""

    parsed = parse_local_date(date_str)
    if parsed is None:
        return 0
    return calendar.monthrange(parsed.year, parsed.month)[1]


def month_length(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_days(date_str: str, days: int) -> str:
    parsed = parse_local_date(date_str)
    if parsed is None:
        return date_str
    try:
        return to_ymd(parsed + timedelta(days=days))
    except OverflowError:
        return date_str


def previous_date(date_str: str) -> str:
    return add_days(date_str, -1)


def next_date(date_str: str) -> str:
    return add_days(date_str, 1)


def week_start(date_str: str) -> str:
    """Monday of the week containing ``date_str``."""

    parsed = parse_local_date(date_str)
    if parsed is None:
        return ""
    return add_days(date_str, -parsed.weekday())


def iso_weeks_in_year(iso_year: int) -> int:
    """52 or 53; December 28th always falls in the year's last ISO week."""

    return date(iso_year, 12, 28).isocalendar()[1]


def iso_week_key(date_str: str) -> str:
    """ISO-8601 week key ``"<iso_year>-<week>"`` (week not zero-padded).

    Dates near the year boundary belong to the ISO year of their week, so
    2024-12-30 yields ``"2025-1"`` and 2021-01-03 yields ``"2020-53"``.
    """

    parsed = parse_local_date(date_str)
    if parsed is None:
        return ""
    iso_year, iso_week, _ = parsed.isocalendar()
    return f"{iso_year}-{iso_week}"


def parse_week_key(week_key: object) -> Optional[tuple[int, int]]:
    """Return ``(iso_year, week)`` or ``None`` for malformed keys."""

    if not isinstance(week_key, str):
        return None
    match = _WEEK_KEY_RE.match(week_key)
    if match is None:
        return None
    iso_year, week = int(match.group(1)), int(match.group(2))
    if iso_year < 1 or not 1 <= week <= iso_weeks_in_year(iso_year):
        return None
    return iso_year, week


def week_key_sort_key(week_key: str) -> tuple[int, int]:
    """Chronological ordering key; malformed keys sort first."""

    return parse_week_key(week_key) or (0, 0)


def previous_week_key(week_key: str) -> str:
    """Decrement a week key, crossing into the true last week of the prior year."""

    parsed = parse_week_key(week_key)
    if parsed is None:
        return ""
    iso_year, week = parsed
    if week > 1:
        return f"{iso_year}-{week - 1}"
    if iso_year <= 1:
        return ""
    return f"{iso_year - 1}-{iso_weeks_in_year(iso_year - 1)}"


def dates_in_week(week_key: str) -> list[str]:
    """The seven dates (Monday..Sunday) of an ISO week key."""

    parsed = parse_week_key(week_key)
    if parsed is None:
        return []
    iso_year, week = parsed
    try:
        monday = date.fromisocalendar(iso_year, week, 1)
        return [to_ymd(monday + timedelta(days=offset)) for offset in range(7)]
    except (ValueError, OverflowError):
        return []


def iter_dates(start: str, end: str) -> list[str]:
    """Inclusive ascending list of dates between ``start`` and ``end``."""

    first = parse_local_date(start)
    last = parse_local_date(end)
    if first is None or last is None or first > last:
        return []
    span = (last - first).days
    return [to_ymd(first + timedelta(days=offset)) for offset in range(span + 1)]


def months_back(year: int, month: int, count: int) -> tuple[int, int]:
    """Shift ``(year, month)`` back by ``count`` months."""

    index = year * 12 + (month - 1) - count
    return index // 12, index % 12 + 1


__all__ = [
    "add_days",
    "dates_in_week",
    "day_of_month",
    "day_of_week",
    "days_in_month",
    "format_local_date",
    "is_valid_date",
    "iso_week_key",
    "iso_weeks_in_year",
    "iter_dates",
    "month_length",
    "months_back",
    "next_date",
    "parse_local_date",
    "parse_week_key",
    "previous_date",
    "previous_week_key",
    "to_ymd",
    "today_ymd",
    "week_key_sort_key",
    "week_start",
]
