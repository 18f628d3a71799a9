"""
Local-clock date helpers shared by the parser and the query engine.

Every helper takes an optional ``now`` so callers can pin the clock; when it
is omitted the local clock is read once. Weekdays use Sunday=0 .. Saturday=6.
Absent or unparsable dates never raise: predicates return False.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from enum import IntEnum
from typing import Optional, Union

DateLike = Union[datetime, date, str, None]

_SECONDS_PER_DAY = 24 * 60 * 60


class Weekday(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


def to_datetime(value: DateLike) -> Optional[datetime]:
    """Coerce a stored due date to a naive local datetime, or None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return to_datetime(datetime.fromisoformat(s))
        except ValueError:
            return None
    return None


def weekday_of(d: Union[date, datetime]) -> Weekday:
    return Weekday((d.weekday() + 1) % 7)


def _now(now: Optional[datetime]) -> datetime:
    return to_datetime(now) if now is not None else datetime.now()


def next_weekday(target: int, now: Optional[datetime] = None) -> datetime:
    """Next occurrence of ``target`` strictly after today (today + 7 if today matches)."""
    now = _now(now)
    days = (int(target) - weekday_of(now) + 7) % 7 or 7
    return now + timedelta(days=days)


def this_or_next_weekday(target: int, now: Optional[datetime] = None) -> datetime:
    """Occurrence of ``target`` later this week, else next week's.

    When today already is ``target`` this rolls to today + 7, the same as
    :func:`next_weekday`.
    """
    now = _now(now)
    days = int(target) - weekday_of(now)
    if days <= 0:
        days += 7
    return now + timedelta(days=days)


def days_until(value: DateLike, now: Optional[datetime] = None) -> Optional[int]:
    d = to_datetime(value)
    if d is None:
        return None
    delta = (d - _now(now)).total_seconds()
    return math.ceil(delta / _SECONDS_PER_DAY)


def is_today(value: DateLike, now: Optional[datetime] = None) -> bool:
    d = to_datetime(value)
    if d is None:
        return False
    return d.date() == _now(now).date()


def is_overdue(value: DateLike, now: Optional[datetime] = None) -> bool:
    d = to_datetime(value)
    if d is None:
        return False
    return d < _now(now)


def is_upcoming(value: DateLike, now: Optional[datetime] = None) -> bool:
    """Due within the next 7 days, counting today."""
    days = days_until(value, now)
    if days is None:
        return False
    return 0 <= days <= 7


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def format_due_date(value: DateLike, now: Optional[datetime] = None) -> str:
    d = to_datetime(value)
    if d is None:
        return ""
    days = days_until(d, now)
    if days < 0:
        return f"Overdue by {_plural(abs(days), 'day')}"
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if days <= 7:
        return f"In {days} days"
    return d.date().isoformat()


def relative_time(value: DateLike, now: Optional[datetime] = None) -> str:
    d = to_datetime(value)
    if d is None:
        return ""
    elapsed = (_now(now) - d).total_seconds()
    minutes = math.floor(elapsed / 60)
    hours = math.floor(elapsed / 3600)
    days = math.floor(elapsed / _SECONDS_PER_DAY)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{_plural(minutes, 'minute')} ago"
    if hours < 24:
        return f"{_plural(hours, 'hour')} ago"
    if days < 7:
        return f"{_plural(days, 'day')} ago"
    return d.date().isoformat()
