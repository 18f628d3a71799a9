from datetime import datetime, timedelta

import pytest

from extraction.extractors import (
    clean_title,
    extract_date_time,
    extract_priority,
    extract_project,
    extract_tags,
    extract_time,
    parse_recurring,
)

from conftest import NOW


def test_keyword_date_keeps_time_of_day():
    result = extract_date_time("call bob tomorrow", NOW)
    assert result.value == NOW + timedelta(days=1)
    assert result.remaining_text == "call bob"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("rent 11/1", datetime(2026, 11, 1)),
        ("trip 3/15/27", datetime(2027, 3, 15)),
        ("party 12-24-2026", datetime(2026, 12, 24)),
        ("review 20 december", datetime(2026, 12, 20)),
        ("dentist jan 5", datetime(2027, 1, 5)),
    ],
)
def test_absolute_dates(text, expected):
    result = extract_date_time(text, NOW)
    assert result.value == expected
    assert result.remaining_text == text.split(" ")[0]


def test_month_name_date_earlier_today_rolls_to_next_year():
    assert extract_date_time("oct 14", NOW).value == datetime(2027, 10, 14)


def test_keyword_suppresses_numeric_date():
    result = extract_date_time("tomorrow 12/25", NOW)
    assert result.value.date() == (NOW + timedelta(days=1)).date()
    assert result.remaining_text == "12/25"


def test_impossible_numeric_date_is_ignored():
    result = extract_date_time("code 13/45", NOW)
    assert result.value is None
    assert result.remaining_text == "code 13/45"


def test_next_friday_is_a_future_friday():
    due = extract_date_time("next friday", NOW).value
    assert due.strftime("%A") == "Friday"
    assert due > NOW


def test_weekday_keyword_inside_tag_is_not_a_date():
    assert extract_date_time("plan #monday", NOW).value is None


@pytest.mark.parametrize(
    "text, hour, minute",
    [
        ("today at 3pm", 15, 0),
        ("today 12am", 0, 0),
        ("today 12pm", 12, 0),
        ("today 9:45 am", 9, 45),
        ("today 14:30", 14, 30),
        ("today at 14:30", 14, 30),
        ("today at 9:45 am", 9, 45),
        ("today at 7", 7, 0),
    ],
)
def test_time_combines_with_found_date(text, hour, minute):
    result = extract_date_time(text, NOW)
    assert result.value == datetime(2026, 10, 14, hour, minute)
    assert result.remaining_text == ""


def test_time_without_date_is_not_extracted():
    result = extract_date_time("meet at 5pm", NOW)
    assert result.value is None
    assert result.remaining_text == "meet at 5pm"


def test_out_of_range_time_is_ignored():
    assert extract_time("at 25").value is None


def test_priority_table_order_breaks_ties():
    result = extract_priority("this is low and important")
    assert result.value == "high"
    assert result.remaining_text == "this is low and"


def test_priority_requires_whole_word():
    assert extract_priority("take the highway").value is None
    assert extract_priority("#urgent stuff").value is None


def test_project_hint():
    assert extract_project("office party") == ("work", "party")
    assert extract_project("home chores") == ("personal", "chores")
    assert extract_project("selfish").value is None


def test_tags_keep_case_and_first_seen_order():
    text = "Buy #Milk and #eggs @Bob #Milk"
    result = extract_tags(text)
    assert result.value == ["Milk", "eggs", "Bob"]
    assert result.remaining_text == text


def test_hashtags_are_collected_before_mentions():
    assert extract_tags("@alice #review").value == ["review", "alice"]


@pytest.mark.parametrize(
    "text, label",
    [
        ("water plants every day", "daily"),
        ("Annually renew license", "yearly"),
        ("each month pay rent", "monthly"),
        ("weekly or daily", "daily"),
        ("nothing here", None),
    ],
)
def test_recurrence(text, label):
    assert parse_recurring(text) == label


def test_clean_title():
    assert clean_title("  - buy   milk  ") == "Buy milk"
    assert clean_title("• item *") == "Item"
    assert clean_title("already Capitalized") == "Already Capitalized"
    assert clean_title("") == ""
