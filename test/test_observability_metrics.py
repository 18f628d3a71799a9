import logging

from prometheus_client import REGISTRY, generate_latest

from extraction.task_parser import parse_task_input
from focusflow.logging_setup import LOG_FORMAT, configure_logging
from query.engine import query_tasks

from conftest import NOW


def _sample(name, labels=None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_metrics_are_exposed_in_prometheus_text() -> None:
    parse_task_input("urgent report tomorrow", now=NOW)
    query_tasks([], "today", now=NOW)

    body = generate_latest().decode("utf-8")
    assert "focusflow_tasks_parsed_total" in body
    assert "focusflow_parse_signals_total" in body
    assert "focusflow_queries_total" in body
    assert "focusflow_query_latency_seconds" in body


def test_parse_increments_signal_counters() -> None:
    parsed_before = _sample("focusflow_tasks_parsed_total")
    due_before = _sample("focusflow_parse_signals_total", {"signal": "due_date"})
    tags_before = _sample("focusflow_parse_signals_total", {"signal": "tags"})

    parse_task_input("call bank friday", now=NOW)

    assert _sample("focusflow_tasks_parsed_total") == parsed_before + 1
    assert _sample("focusflow_parse_signals_total", {"signal": "due_date"}) == due_before + 1
    assert _sample("focusflow_parse_signals_total", {"signal": "tags"}) == tags_before


def test_query_counts_per_view() -> None:
    before = _sample("focusflow_queries_total", {"view": "upcoming"})
    query_tasks([], "upcoming", now=NOW)
    query_tasks([], "upcoming", now=NOW)
    assert _sample("focusflow_queries_total", {"view": "upcoming"}) == before + 2


def test_mutations_are_counted(app) -> None:
    before = _sample("focusflow_task_mutations_total", {"action": "create"})
    task = app.create_task({"title": "Counted"})
    deleted_before = _sample("focusflow_task_mutations_total", {"action": "delete"})
    app.delete_task(task.id)

    assert _sample("focusflow_task_mutations_total", {"action": "create"}) == before + 1
    assert _sample("focusflow_task_mutations_total", {"action": "delete"}) == deleted_before + 1


def test_store_warnings_are_logged(app, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        assert app.update_task("missing", {"title": "x"}) is None
    assert "Task with id missing not found" in caplog.text


def test_configure_logging_is_repeatable() -> None:
    configure_logging("DEBUG")
    configure_logging()
    assert "%(levelname)s" in LOG_FORMAT
