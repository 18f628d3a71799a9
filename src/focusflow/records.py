from __future__ import annotations

from typing import Any, Mapping, Union

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

TaskLike = Union[BaseModel, Mapping[str, Any]]


def get_field(task: TaskLike, name: str, default: Any = None) -> Any:
    """Read a snake_case field from a Task model or a stored camelCase record.

    Missing and null values both come back as ``default``.
    """
    if isinstance(task, BaseModel):
        value = getattr(task, name, None)
    else:
        value = task.get(camel_key(name), task.get(name))
    return default if value is None else value


def camel_key(name: str) -> str:
    return to_camel(name) if "_" in name else name


def camel_keys(data: Mapping[str, Any]) -> dict:
    """Normalize snake_case or camelCase keys to the stored camelCase form."""
    return {camel_key(k): v for k, v in data.items()}
