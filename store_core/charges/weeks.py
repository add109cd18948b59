# store_core/charges/weeks.py
"""
Week calendar used by the charge ledger and the statistics roll-ups.

Weeks run Monday to Sunday. A week *belongs* to the month its Monday falls in,
so a month owns 4 or 5 weeks, while up to 6 weeks may *overlap* it.

Keys:
- week key  = the Monday, "YYYY-MM-DD"
- month key = "YYYY-MM"
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

WEEK_KEY_FORMAT = "%Y-%m-%d"
MONTH_KEY_FORMAT = "%Y-%m"

ONE_WEEK = timedelta(days=7)


@dataclass(frozen=True)
class WeekInfo:
    week_key: str
    start: date
    end: date
    month_key: str
    belongs_to_month: bool


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def sunday_of(day: date) -> date:
    return monday_of(day) + timedelta(days=6)


def week_key(day: date) -> str:
    return monday_of(day).strftime(WEEK_KEY_FORMAT)


def month_key(day: date) -> str:
    return day.strftime(MONTH_KEY_FORMAT)


def _parse(value, fmt: str) -> Optional[date]:
    if not isinstance(value, str):
        return None
    try:
        day = datetime.strptime(value.strip(), fmt).date()
    except ValueError:
        return None
    # strptime accepts "2024-3"; only the zero-padded form is a key
    if value.strip() != day.strftime(fmt):
        return None
    return day


def parse_week_key(key: str) -> Optional[date]:
    """Monday of a week key, or None when the key is malformed or not a Monday."""
    day = _parse(key, WEEK_KEY_FORMAT)
    if day is None or day.weekday() != 0:
        return None
    return day


def parse_month_key(key: str) -> Optional[date]:
    """First day of the month for a month key, or None when malformed."""
    return _parse(key, MONTH_KEY_FORMAT)


def is_valid_week_key(key: str) -> bool:
    return parse_week_key(key) is not None


def is_valid_month_key(key: str) -> bool:
    return parse_month_key(key) is not None


def month_key_for_week(key: str) -> Optional[str]:
    monday = parse_week_key(key)
    return month_key(monday) if monday else None


def days_in_month(key: str) -> int:
    first = parse_month_key(key)
    if first is None:
        return 0
    return calendar.monthrange(first.year, first.month)[1]


def month_bounds(key: str) -> Optional[tuple[date, date]]:
    first = parse_month_key(key)
    if first is None:
        return None
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    return first, last


def previous_month_key(key: str, n: int = 1) -> Optional[str]:
    first = parse_month_key(key)
    if first is None:
        return None
    index = first.year * 12 + (first.month - 1) - n
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def _week_info(monday: date, key: str) -> WeekInfo:
    mk = month_key(monday)
    return WeekInfo(
        week_key=monday.strftime(WEEK_KEY_FORMAT),
        start=monday,
        end=monday + timedelta(days=6),
        month_key=mk,
        belongs_to_month=(mk == key),
    )


def weeks_overlapping_month(key: str) -> list[WeekInfo]:
    bounds = month_bounds(key)
    if bounds is None:
        return []
    first, last = bounds

    weeks = []
    monday = monday_of(first)
    while monday <= last:
        weeks.append(_week_info(monday, key))
        monday += ONE_WEEK
    return weeks


def weeks_belonging_to_month(key: str) -> list[WeekInfo]:
    return [w for w in weeks_overlapping_month(key) if w.belongs_to_month]


def week_overlaps_month(week: str, month: str) -> bool:
    monday = parse_week_key(week)
    bounds = month_bounds(month)
    if monday is None or bounds is None:
        return False
    first, last = bounds
    return monday + timedelta(days=6) >= first and monday <= last
