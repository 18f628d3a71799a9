from datetime import date, datetime, timedelta

from scheduling.dates import (
    Weekday,
    format_due_date,
    is_overdue,
    is_today,
    is_upcoming,
    next_weekday,
    relative_time,
    this_or_next_weekday,
    to_datetime,
    weekday_of,
)

from conftest import NOW


def test_weekday_numbering_starts_on_sunday():
    assert weekday_of(NOW) == Weekday.WEDNESDAY
    assert weekday_of(date(2026, 10, 18)) == Weekday.SUNDAY


def test_next_weekday_is_strictly_after_today():
    assert next_weekday(Weekday.FRIDAY, NOW).date() == date(2026, 10, 16)
    assert next_weekday(Weekday.TUESDAY, NOW).date() == date(2026, 10, 20)
    # today's weekday rolls a full week
    assert next_weekday(Weekday.WEDNESDAY, NOW).date() == date(2026, 10, 21)


def test_this_or_next_weekday():
    assert this_or_next_weekday(Weekday.FRIDAY, NOW).date() == date(2026, 10, 16)
    assert this_or_next_weekday(Weekday.MONDAY, NOW).date() == date(2026, 10, 19)


def test_this_or_next_weekday_never_returns_today():
    # Matching weekday rolls to next week, same as next_weekday.
    assert this_or_next_weekday(Weekday.WEDNESDAY, NOW).date() == date(2026, 10, 21)


def test_is_today():
    assert is_today(NOW.replace(hour=23, minute=59), NOW)
    assert is_today("2026-10-14T08:00:00", NOW)
    assert not is_today(datetime(2026, 10, 15), NOW)


def test_is_overdue():
    assert is_overdue(NOW - timedelta(minutes=1), NOW)
    assert not is_overdue(NOW + timedelta(minutes=1), NOW)


def test_is_upcoming_window_is_seven_days_inclusive():
    assert is_upcoming(NOW, NOW)
    assert is_upcoming(NOW + timedelta(days=7), NOW)
    assert not is_upcoming(NOW + timedelta(days=7, hours=1), NOW)
    assert not is_upcoming(NOW - timedelta(days=2), NOW)


def test_absent_or_garbage_dates_never_match():
    for value in (None, "", "not a date"):
        assert to_datetime(value) is None
        assert not is_today(value, NOW)
        assert not is_overdue(value, NOW)
        assert not is_upcoming(value, NOW)


def test_format_due_date():
    assert format_due_date(NOW + timedelta(days=1), NOW) == "Tomorrow"
    assert format_due_date(NOW + timedelta(days=3), NOW) == "In 3 days"
    assert format_due_date(NOW - timedelta(days=1), NOW) == "Overdue by 1 day"
    assert format_due_date(NOW - timedelta(days=2), NOW) == "Overdue by 2 days"
    assert format_due_date(NOW + timedelta(days=30), NOW) == "2026-11-13"
    assert format_due_date(None, NOW) == ""


def test_relative_time():
    assert relative_time(NOW - timedelta(seconds=30), NOW) == "Just now"
    assert relative_time(NOW - timedelta(minutes=5), NOW) == "5 minutes ago"
    assert relative_time(NOW - timedelta(hours=1), NOW) == "1 hour ago"
    assert relative_time(NOW - timedelta(days=3), NOW) == "3 days ago"
    assert relative_time(NOW - timedelta(days=10), NOW) == "2026-10-04"
