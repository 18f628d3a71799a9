from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class View(str, Enum):
    TODAY = "today"
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    PROJECT = "project"


class SortBy(str, Enum):
    PRIORITY = "priority"
    DUE_DATE = "dueDate"
    CREATED = "created"
    ALPHABETICAL = "alphabetical"
    COMPLETED = "completed"


Recurrence = Literal["daily", "weekly", "monthly", "yearly"]

DEFAULT_PROJECT_IDS = ("personal", "work")


class StoredModel(BaseModel):
    """Base for records persisted in the key-value store.

    Stored JSON uses camelCase keys (``projectId``, ``dueDate`` ...) so files
    written by older versions stay readable; Python code uses snake_case.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Task(StoredModel):
    id: str
    title: str = Field(..., min_length=1)
    description: str = ""
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    project_id: str = ""
    tags: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    recurring: Optional[Recurrence] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("description", "project_id", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v

    @field_validator("priority", "completed", mode="before")
    @classmethod
    def none_as_default(cls, v, info):
        return cls.model_fields[info.field_name].default if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def unique_tags(cls, v):
        if v is None:
            return []
        seen: List[str] = []
        for tag in v:
            if tag not in seen:
                seen.append(tag)
        return seen


class Project(StoredModel):
    id: str
    name: str = Field(..., min_length=1)
    color: str = "#3b82f6"
    description: str = ""
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("name must not be blank")
        return v2


class Suggestions(StoredModel):
    """Values the parser detected but the caller has not committed yet."""

    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    tags: List[str] = Field(default_factory=list)
    project_id: Optional[str] = None


class ParsedTaskInput(StoredModel):
    title: str = ""
    due_date: Optional[datetime] = None
    priority: Priority = Priority.MEDIUM
    tags: List[str] = Field(default_factory=list)
    project_id: str = ""
    suggestions: Suggestions = Field(default_factory=Suggestions)


class TaskFilters(StoredModel):
    search: str = ""
    priority: List[Priority] = Field(default_factory=list)
    project: str = ""
    tags: List[str] = Field(default_factory=list)
    overdue: bool = False
    today: bool = False
    # None means no constraint on completion state.
    completed: Optional[bool] = None


class TaskStats(StoredModel):
    total: int = 0
    completed: int = 0
    overdue: int = 0
    today: int = 0
    today_view: int = 0
    upcoming: int = 0
    completion_rate: int = 0


class Settings(StoredModel):
    theme: Literal["light", "dark"] = "light"
    focus_mode: bool = False
    notifications: bool = True
    sort_by: SortBy = SortBy.PRIORITY
    default_project: str = ""
    default_priority: Priority = Priority.MEDIUM
    current_view: View = View.TODAY
