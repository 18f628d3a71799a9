from datetime import datetime

import pytest

from extraction.task_parser import TaskInputParser, parse_task_input

from conftest import NOW


@pytest.mark.parametrize("text", ["Buy groceries", "read a book", "", None])
def test_no_signals_gives_defaults(text):
    parsed = parse_task_input(text, now=NOW)
    assert parsed.priority == "medium"
    assert parsed.due_date is None
    assert parsed.project_id == ""
    assert parsed.tags == []
    assert parsed.suggestions.priority is None
    assert parsed.suggestions.due_date is None
    assert parsed.suggestions.project_id is None
    assert parsed.suggestions.tags == []


def test_plain_text_title_is_capitalised():
    assert parse_task_input("buy groceries", now=NOW).title == "Buy groceries"


def test_meeting_tomorrow_at_3pm():
    parsed = parse_task_input("Meeting with John tomorrow at 3pm", now=NOW)
    assert parsed.due_date == datetime(2026, 10, 15, 15, 0)
    assert parsed.suggestions.due_date == parsed.due_date
    assert parsed.project_id == "work"
    assert parsed.suggestions.project_id == "work"
    assert "with john" in parsed.title.lower()
    assert "tomorrow" not in parsed.title.lower()
    assert "3pm" not in parsed.title.lower()


def test_urgent_call_with_tags():
    parsed = parse_task_input("urgent: call mom #family @reminder", now=NOW)
    assert parsed.priority == "high"
    assert parsed.suggestions.priority == "high"
    assert parsed.tags == ["family", "reminder"]
    assert parsed.suggestions.tags == ["family", "reminder"]
    # "#family" is a tag, not a project hint
    assert parsed.project_id == ""
    assert "call mom" in parsed.title
    assert "urgent" not in parsed.title.lower()


def test_tags_come_from_original_case():
    parsed = parse_task_input("Plan #ProjectX launch", now=NOW)
    assert parsed.tags == ["ProjectX"]


def test_stages_narrow_the_text_in_order():
    parsed = parse_task_input("high level meeting tomorrow", now=NOW)
    assert parsed.due_date.date() == datetime(2026, 10, 15).date()
    assert parsed.priority == "high"
    assert parsed.project_id == "work"
    assert parsed.title == "Level"


def test_next_friday_round_trip():
    parsed = parse_task_input("submit report next friday", now=NOW)
    assert parsed.due_date.strftime("%A") == "Friday"
    assert parsed.due_date.date() > NOW.date()
    assert parsed.title == "Submit report"


def test_bullet_markers_are_stripped():
    assert parse_task_input("- pick up keys", now=NOW).title == "Pick up keys"


def test_parse_recurring_is_separate_from_parse():
    parser = TaskInputParser()
    assert parser.parse_recurring("Stand-up every day") == "daily"
    assert parser.parse_recurring(None) is None
    # parse() itself never sets a recurrence
    assert "recurring" not in parser.parse("water plants weekly", now=NOW).model_dump()


def test_custom_keyword_tables():
    parser = TaskInputParser(project_keywords=(("gym", "health"),))
    parsed = parser.parse("gym session", now=NOW)
    assert parsed.project_id == "health"
    assert parsed.title == "Session"


def test_generate_suggestions(make_task):
    tasks = [
        make_task("Buy milk", tags=["shopping", "home"]),
        make_task("Buy bread", tags=["shopping"]),
        make_task("Call mom", tags=["family"]),
    ]
    suggestions = TaskInputParser().generate_suggestions("buy", tasks)
    assert suggestions.titles == ["Buy milk", "Buy bread"]
    assert suggestions.tags == ["shopping", "home", "family"]


def test_generate_suggestions_limits_tags(make_task):
    tasks = [make_task("x", tags=[f"t{i}"]) for i in range(8)]
    suggestions = TaskInputParser().generate_suggestions("zzz", tasks, max_tags=3)
    assert suggestions.tags == ["t0", "t1", "t2"]
