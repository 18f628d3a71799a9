from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from extraction import extractors
from extraction.extractors import (
    DATE_KEYWORDS,
    PRIORITY_KEYWORDS,
    PROJECT_KEYWORDS,
    DateResolver,
)
from focusflow import config
from focusflow.metrics import PARSE_SIGNALS_TOTAL, TASKS_PARSED_TOTAL
from focusflow.models import ParsedTaskInput, Priority, Suggestions
from focusflow.records import TaskLike, get_field
from scheduling.dates import to_datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputSuggestions:
    titles: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


class TaskInputParser:
    """Turns a line of free text into a task draft.

    Stages run in a fixed order: date/time, priority, tags, project, title.
    Every stage except tags narrows the text the next one sees; tags are read
    from the untouched input.
    """

    def __init__(
        self,
        date_keywords: Sequence[Tuple[str, DateResolver]] = DATE_KEYWORDS,
        priority_keywords: Sequence[Tuple[str, str]] = PRIORITY_KEYWORDS,
        project_keywords: Sequence[Tuple[str, str]] = PROJECT_KEYWORDS,
    ):
        self.date_keywords = tuple(date_keywords)
        self.priority_keywords = tuple(priority_keywords)
        self.project_keywords = tuple(project_keywords)

    def parse(self, raw_text: Optional[str], now: Optional[datetime] = None) -> ParsedTaskInput:
        raw = raw_text if isinstance(raw_text, str) else ""
        # one clock reading per parse so every stage agrees on "today"
        now = to_datetime(now) if now is not None else datetime.now()
        working = raw.lower().strip()
        detected = {}

        date_result = extractors.extract_date_time(working, now, self.date_keywords)
        if date_result.value is not None:
            detected["due_date"] = date_result.value
            working = date_result.remaining_text

        priority_result = extractors.extract_keyword(working, self.priority_keywords)
        if priority_result.value is not None:
            detected["priority"] = priority_result.value
            working = priority_result.remaining_text

        tags_result = extractors.extract_tags(raw)
        if tags_result.value:
            detected["tags"] = list(tags_result.value)

        project_result = extractors.extract_keyword(working, self.project_keywords)
        if project_result.value is not None:
            detected["project_id"] = project_result.value
            working = project_result.remaining_text

        for signal in detected:
            PARSE_SIGNALS_TOTAL.labels(signal=signal).inc()
        TASKS_PARSED_TOTAL.inc()

        parsed = ParsedTaskInput(
            title=extractors.clean_title(working),
            due_date=detected.get("due_date"),
            priority=detected.get("priority", Priority.MEDIUM),
            tags=detected.get("tags", []),
            project_id=detected.get("project_id", ""),
            suggestions=Suggestions(**detected),
        )
        logger.debug(f"Parsed task input {raw!r} -> {sorted(detected)} title={parsed.title!r}")
        return parsed

    def parse_recurring(self, text: Optional[str]) -> Optional[str]:
        return extractors.parse_recurring(text or "")

    def generate_suggestions(
        self,
        text: Optional[str],
        existing_tasks: Iterable[TaskLike] = (),
        max_tags: int = config.MAX_SUGGESTED_TAGS,
    ) -> InputSuggestions:
        """Suggest titles of similar existing tasks and the most used tags."""
        needle = (text or "").lower()
        titles: List[str] = []
        tag_counts: Counter = Counter()

        for task in existing_tasks:
            title = get_field(task, "title", "")
            lowered = title.lower()
            if (needle in lowered or lowered[:3] in needle) and title not in titles:
                titles.append(title)
            tag_counts.update(get_field(task, "tags", []))

        # most_common keeps first-seen order among equal counts
        tags = [tag for tag, _ in tag_counts.most_common(max_tags)]
        return InputSuggestions(titles=titles, tags=tags)


def parse_task_input(raw_text: Optional[str], now: Optional[datetime] = None) -> ParsedTaskInput:
    """Parse free text with the default keyword tables. Never raises."""
    return TaskInputParser().parse(raw_text, now=now)
