"""
Task query engine: view selection, criteria filtering, sorting and statistics.

All functions are pure. They accept ``Task`` models or stored records (dicts
with camelCase keys) and never modify them. A missing ``dueDate`` means no
due date, missing ``tags`` means no tags, and a missing or unknown
``priority`` ranks below ``low``.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime
from functools import cmp_to_key
from typing import Callable, Iterable, List, Mapping, Optional, Tuple, Union

from focusflow.metrics import QUERIES_TOTAL, QUERY_LATENCY_SECONDS
from focusflow.models import SortBy, TaskFilters, TaskStats, View
from focusflow.records import TaskLike, get_field
from scheduling.dates import is_overdue, is_today, is_upcoming, to_datetime

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}


def _value(v) -> str:
    return getattr(v, "value", v)


def _is_completed(task: TaskLike) -> bool:
    return bool(get_field(task, "completed", False))


def in_today_view(task: TaskLike, now: datetime) -> bool:
    if _is_completed(task):
        return False
    due = to_datetime(get_field(task, "due_date"))
    return due is None or is_today(due, now) or is_overdue(due, now)


def filter_by_view(
    tasks: Iterable[TaskLike],
    view: Union[View, str, None],
    project_id: str = "",
    now: Optional[datetime] = None,
) -> List[TaskLike]:
    now = now or datetime.now()
    view = _value(view)

    if view == View.TODAY.value:
        return [t for t in tasks if in_today_view(t, now)]
    if view == View.UPCOMING.value:
        return [
            t for t in tasks
            if not _is_completed(t) and is_upcoming(get_field(t, "due_date"), now)
        ]
    if view == View.COMPLETED.value:
        return [t for t in tasks if _is_completed(t)]
    if view == View.PROJECT.value and project_id:
        return [t for t in tasks if get_field(t, "project_id", "") == project_id]
    return list(tasks)


def _matches_search(task: TaskLike, term: str) -> bool:
    term = term.lower()
    if term in get_field(task, "title", "").lower():
        return True
    if term in get_field(task, "description", "").lower():
        return True
    return any(term in tag.lower() for tag in get_field(task, "tags", []))


def matches_filters(task: TaskLike, filters: TaskFilters, now: datetime) -> bool:
    if filters.search and not _matches_search(task, filters.search):
        return False

    if filters.priority:
        allowed = {_value(p) for p in filters.priority}
        if _value(get_field(task, "priority")) not in allowed:
            return False

    if filters.project and get_field(task, "project_id", "") != filters.project:
        return False

    due = get_field(task, "due_date")
    if filters.overdue and not is_overdue(due, now):
        return False
    if filters.today and not is_today(due, now):
        return False

    if filters.completed is not None and _is_completed(task) != filters.completed:
        return False

    if filters.tags:
        task_tags = get_field(task, "tags", [])
        if not any(tag in task_tags for tag in filters.tags):
            return False

    return True


def _as_filters(filters: Union[TaskFilters, Mapping, None]) -> TaskFilters:
    if filters is None:
        return TaskFilters()
    if isinstance(filters, TaskFilters):
        return filters
    return TaskFilters.model_validate(filters)


def filter_tasks(
    tasks: Iterable[TaskLike],
    filters: Union[TaskFilters, Mapping, None] = None,
    now: Optional[datetime] = None,
) -> List[TaskLike]:
    if filters is None:
        return list(tasks)
    filters = _as_filters(filters)
    now = now or datetime.now()
    return [t for t in tasks if matches_filters(t, filters, now)]


def _priority_rank(task: TaskLike) -> int:
    return PRIORITY_ORDER.get(_value(get_field(task, "priority")), 0)


def _compare_due(a: TaskLike, b: TaskLike) -> int:
    da = to_datetime(get_field(a, "due_date"))
    db = to_datetime(get_field(b, "due_date"))
    if da is None and db is None:
        return 0
    if da is None:
        return 1
    if db is None:
        return -1
    return (da > db) - (da < db)


def _created_key(task: TaskLike) -> float:
    created = to_datetime(get_field(task, "created_at"))
    # newest first; undated records go last
    return -created.timestamp() if created is not None else math.inf


def _title_key(task: TaskLike) -> Tuple[str, str]:
    title = get_field(task, "title", "")
    # case-insensitive, with the original case as tie-break
    return title.casefold(), title


_SORT_KEYS: dict = {
    SortBy.PRIORITY.value: lambda t: -_priority_rank(t),
    SortBy.DUE_DATE.value: cmp_to_key(_compare_due),
    SortBy.CREATED.value: _created_key,
    SortBy.ALPHABETICAL.value: _title_key,
    SortBy.COMPLETED.value: _is_completed,
}


def sort_tasks(tasks: Iterable[TaskLike], sort_by: Union[SortBy, str, None] = SortBy.PRIORITY) -> List[TaskLike]:
    """Return a new list ordered by ``sort_by``. Ties keep their input order."""
    key: Optional[Callable] = _SORT_KEYS.get(_value(sort_by))
    if key is None:
        return list(tasks)
    return sorted(tasks, key=key)


def completion_rate(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    # half-up rounding, not banker's rounding
    return math.floor(completed * 100 / total + 0.5)


def compute_stats(tasks: Iterable[TaskLike], now: Optional[datetime] = None) -> TaskStats:
    now = now or datetime.now()
    tasks = list(tasks)
    open_tasks = [t for t in tasks if not _is_completed(t)]
    completed = len(tasks) - len(open_tasks)

    return TaskStats(
        total=len(tasks),
        completed=completed,
        overdue=sum(1 for t in open_tasks if is_overdue(get_field(t, "due_date"), now)),
        today=sum(1 for t in open_tasks if is_today(get_field(t, "due_date"), now)),
        today_view=sum(1 for t in tasks if in_today_view(t, now)),
        upcoming=sum(1 for t in open_tasks if is_upcoming(get_field(t, "due_date"), now)),
        completion_rate=completion_rate(completed, len(tasks)),
    )


def query_tasks(
    tasks: Iterable[TaskLike],
    view: Union[View, str, None] = View.TODAY,
    filters: Union[TaskFilters, Mapping, None] = None,
    sort_by: Union[SortBy, str, None] = SortBy.PRIORITY,
    now: Optional[datetime] = None,
) -> List[TaskLike]:
    """View filter, then criteria filter, then sort.

    For the project view the project id comes from ``filters.project``.
    """
    started = time.perf_counter()
    now = now or datetime.now()
    tasks = list(tasks)
    filters = _as_filters(filters)

    result = filter_by_view(tasks, view, project_id=filters.project, now=now)
    result = filter_tasks(result, filters, now=now)
    result = sort_tasks(result, sort_by)

    QUERIES_TOTAL.labels(view=str(_value(view))).inc()
    QUERY_LATENCY_SECONDS.observe(time.perf_counter() - started)
    logger.debug(f"Query view={_value(view)} sort={_value(sort_by)} matched {len(result)}/{len(tasks)} tasks")
    return result
