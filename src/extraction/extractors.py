"""
Signal extractors for free-text task input.

Each extractor receives the lowercased working text and returns an
``Extraction`` with the detected value (or None) and the text that remains
once the matched span is cut out. Keyword tables are ordered tuples: the
first entry that matches wins, so table order is the tie-break.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Callable, List, NamedTuple, Optional, Pattern, Sequence, Tuple

from scheduling.dates import Weekday, next_weekday, this_or_next_weekday


class Extraction(NamedTuple):
    value: object
    remaining_text: str


DateResolver = Callable[[datetime], datetime]

_WEEKDAYS = (
    ("monday", Weekday.MONDAY),
    ("tuesday", Weekday.TUESDAY),
    ("wednesday", Weekday.WEDNESDAY),
    ("thursday", Weekday.THURSDAY),
    ("friday", Weekday.FRIDAY),
    ("saturday", Weekday.SATURDAY),
    ("sunday", Weekday.SUNDAY),
)

DATE_KEYWORDS: Tuple[Tuple[str, DateResolver], ...] = (
    ("today", lambda now: now),
    ("tomorrow", lambda now: now + timedelta(days=1)),
    ("yesterday", lambda now: now - timedelta(days=1)),
    ("next week", lambda now: now + timedelta(days=7)),
    *(
        (f"next {name}", lambda now, wd=wd: next_weekday(wd, now))
        for name, wd in _WEEKDAYS
    ),
    *(
        (name, lambda now, wd=wd: this_or_next_weekday(wd, now))
        for name, wd in _WEEKDAYS
    ),
)

PRIORITY_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("urgent", "high"),
    ("important", "high"),
    ("critical", "high"),
    ("high", "high"),
    ("asap", "high"),
    ("medium", "medium"),
    ("normal", "medium"),
    ("low", "low"),
    ("minor", "low"),
)

PROJECT_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("work", "work"),
    ("job", "work"),
    ("office", "work"),
    ("meeting", "work"),
    ("project", "work"),
    ("personal", "personal"),
    ("home", "personal"),
    ("family", "personal"),
    ("self", "personal"),
)

RECURRENCE_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"\b(daily|every day|each day)\b", re.IGNORECASE), "daily"),
    (re.compile(r"\b(weekly|every week|each week)\b", re.IGNORECASE), "weekly"),
    (re.compile(r"\b(monthly|every month|each month)\b", re.IGNORECASE), "monthly"),
    (
        re.compile(r"\b(yearly|annually|every year|each year)\b", re.IGNORECASE),
        "yearly",
    ),
)

MONTHS = {
    "jan": 1, "january": 1, "feb": 2, "february": 2, "mar": 3, "march": 3,
    "apr": 4, "april": 4, "may": 5, "jun": 6, "june": 6, "jul": 7, "july": 7,
    "aug": 8, "august": 8, "sep": 9, "september": 9, "oct": 10, "october": 10,
    "nov": 11, "november": 11, "dec": 12, "december": 12,
}

_MONTH_ALT = (
    "january|february|march|april|may|june|july|august|september|october|november|december"
    "|jan|feb|mar|apr|jun|jul|aug|sep|oct|nov|dec"
)

NUMERIC_DATE = re.compile(r"(\d{1,2})[/\-.](\d{1,2})(?:[/\-.](\d{2,4}))?")
DAY_MONTH = re.compile(rf"\b(?P<day>\d{{1,2}})\s+(?P<month>{_MONTH_ALT})\b", re.IGNORECASE)
MONTH_DAY = re.compile(rf"\b(?P<month>{_MONTH_ALT})\s+(?P<day>\d{{1,2}})\b", re.IGNORECASE)

# A leading "at" is absorbed by every time pattern so it does not linger in the title.
TIME_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"(?:\bat\s*)?\b(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?P<period>am|pm)\b", re.IGNORECASE),
    re.compile(r"(?:\bat\s*)?\b(?P<hour>\d{1,2})\s*(?P<period>am|pm)\b", re.IGNORECASE),
    re.compile(r"(?:\bat\s*)?\b(?P<hour>\d{1,2}):(?P<minute>\d{2})\b"),
    re.compile(r"\bat\s*(?P<hour>\d{1,2}):?(?P<minute>\d{2})?\s*(?P<period>am|pm)?\b", re.IGNORECASE),
)

TAG_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"#(\w+)"),
    re.compile(r"@(\w+)"),
)

_WHITESPACE = re.compile(r"\s+")
_LEADING_BULLET = re.compile(r"^\s*[-•*]\s*")
_TRAILING_BULLET = re.compile(r"\s*[-•*]\s*$")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def keyword_pattern(keyword: str) -> Pattern[str]:
    """Whole-word matcher that ignores words written as #tags or @mentions."""
    words = r"\s+".join(re.escape(w) for w in keyword.split())
    return re.compile(rf"(?<![\w#@]){words}(?!\w)", re.IGNORECASE)


def extract_keyword(text: str, table: Sequence[Tuple[str, object]]) -> Extraction:
    for keyword, value in table:
        pattern = keyword_pattern(keyword)
        if pattern.search(text):
            return Extraction(value, collapse_whitespace(pattern.sub("", text)))
    return Extraction(None, text)


def _safe_datetime(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def _numeric_date(match: re.Match, now: datetime) -> Optional[datetime]:
    month, day = int(match.group(1)), int(match.group(2))
    year = int(match.group(3)) if match.group(3) else now.year
    if year < 100:
        year += 2000
    return _safe_datetime(year, month, day)


def _month_name_date(match: re.Match, now: datetime) -> Optional[datetime]:
    month = MONTHS[match.group("month").lower()]
    day = int(match.group("day"))
    candidate = _safe_datetime(now.year, month, day)
    if candidate is not None and candidate < now:
        candidate = _safe_datetime(now.year + 1, month, day)
    return candidate


_DATE_FAMILIES = (
    (NUMERIC_DATE, _numeric_date),
    (DAY_MONTH, _month_name_date),
    (MONTH_DAY, _month_name_date),
)


def extract_time(text: str) -> Extraction:
    """Find a time of day. The value is an ``(hour, minute)`` tuple."""
    for pattern in TIME_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        groups = match.groupdict()
        hour = int(groups["hour"])
        minute = int(groups.get("minute") or 0)
        period = (groups.get("period") or "").lower()

        if period == "pm" and hour != 12:
            hour += 12
        elif period == "am" and hour == 12:
            hour = 0

        if hour > 23 or minute > 59:
            return Extraction(None, text)
        remaining = text[: match.start()] + text[match.end():]
        return Extraction((hour, minute), collapse_whitespace(remaining))

    return Extraction(None, text)


def extract_date_time(
    text: str,
    now: datetime,
    keywords: Sequence[Tuple[str, DateResolver]] = DATE_KEYWORDS,
) -> Extraction:
    """Find a due date, then a time of day in what is left.

    Relative keywords are tried first, then numeric dates, then month names;
    the first family that yields a date stops the search.
    """
    remaining = text
    found: Optional[datetime] = None

    keyword = extract_keyword(text, keywords)
    if keyword.value is not None:
        found = keyword.value(now)
        remaining = keyword.remaining_text
    else:
        for pattern, resolve in _DATE_FAMILIES:
            match = pattern.search(text)
            if not match:
                continue
            candidate = resolve(match, now)
            if candidate is None:
                continue
            found = candidate
            remaining = text[: match.start()] + text[match.end():]
            break

    if found is not None:
        time_result = extract_time(remaining)
        if time_result.value is not None:
            hour, minute = time_result.value
            found = found.replace(hour=hour, minute=minute, second=0, microsecond=0)
            remaining = time_result.remaining_text

    return Extraction(found, collapse_whitespace(remaining))


def extract_priority(text: str) -> Extraction:
    return extract_keyword(text, PRIORITY_KEYWORDS)


def extract_project(text: str) -> Extraction:
    return extract_keyword(text, PROJECT_KEYWORDS)


def extract_tags(text: str) -> Extraction:
    """Collect #tags then @mentions, first-seen order, exact-text de-duplication.

    Reads the case-preserving input and leaves it untouched.
    """
    tags: List[str] = []
    for pattern in TAG_PATTERNS:
        for match in pattern.finditer(text):
            tag = match.group(1)
            if tag and tag not in tags:
                tags.append(tag)
    return Extraction(tags, text)


def parse_recurring(text: str) -> Optional[str]:
    for pattern, label in RECURRENCE_PATTERNS:
        if pattern.search(text or ""):
            return label
    return None


def clean_title(text: str) -> str:
    title = _WHITESPACE.sub(" ", text)
    title = _LEADING_BULLET.sub("", title, count=1)
    title = _TRAILING_BULLET.sub("", title, count=1)
    title = title.strip()
    return title[:1].upper() + title[1:]
