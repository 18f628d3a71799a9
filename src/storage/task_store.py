from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from focusflow.models import Task
from focusflow.records import camel_keys
from storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"

# fields callers may not overwrite through update_task
_PROTECTED = {"id", "createdAt"}


def generate_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    def __init__(self, kv: KeyValueStore, clock: Optional[Callable[[], datetime]] = None):
        self.kv = kv
        self.clock = clock or datetime.now

    def get_records(self) -> List[dict]:
        records = self.kv.get(TASKS_KEY, [])
        return records if isinstance(records, list) else []

    def _load(self) -> Tuple[List[Task], List[Any]]:
        tasks, invalid = [], []
        for record in self.get_records():
            try:
                tasks.append(Task.model_validate(record))
            except ValidationError as e:
                invalid.append(record)
                logger.debug(f"Invalid task record: {e}")
        return tasks, invalid

    def get_tasks(self) -> List[Task]:
        tasks, invalid = self._load()
        if invalid:
            logger.warning(f"Skipping {len(invalid)} invalid task record(s)")
        return tasks

    def set_tasks(self, tasks: List[Task], keep_invalid: bool = True) -> bool:
        """Store ``tasks``. Records that never validated are written back unchanged
        unless ``keep_invalid`` is False."""
        records = [t.to_record() for t in tasks]
        if keep_invalid:
            records.extend(self._load()[1])
        return self.kv.set(TASKS_KEY, records)

    def get_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.get_tasks() if t.id == task_id), None)

    def add_task(self, data: Mapping[str, Any]) -> Task:
        """Create and persist a task. Raises ``ValidationError`` on a blank title."""
        now = self.clock()
        fields = camel_keys(data)
        task = Task(
            id=generate_id(),
            title=fields.get("title") or "",
            description=fields.get("description") or "",
            priority=fields.get("priority") or "medium",
            project_id=fields.get("projectId") or "",
            tags=fields.get("tags") or [],
            due_date=fields.get("dueDate") or None,
            recurring=fields.get("recurring") or None,
            created_at=now,
            updated_at=now,
        )
        tasks = self.get_tasks()
        tasks.append(task)
        self.set_tasks(tasks)
        return task

    def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Optional[Task]:
        """Merge ``updates`` into a task.

        ``completedAt`` is stamped when a task becomes completed and cleared
        when it is reopened; other updates leave it alone.
        """
        tasks = self.get_tasks()
        index = next((i for i, t in enumerate(tasks) if t.id == task_id), None)
        if index is None:
            logger.warning(f"Task with id {task_id} not found")
            return None

        now = self.clock()
        changes = {k: v for k, v in camel_keys(updates).items() if k not in _PROTECTED}
        record = {**tasks[index].to_record(), **changes, "updatedAt": now}
        updated = Task.model_validate(record)

        if changes.get("completed") and updated.completed_at is None:
            updated.completed_at = now
        elif changes.get("completed") is False:
            updated.completed_at = None

        tasks[index] = updated
        self.set_tasks(tasks)
        return updated

    def delete_task(self, task_id: str) -> bool:
        tasks = self.get_tasks()
        remaining = [t for t in tasks if t.id != task_id]
        if len(remaining) == len(tasks):
            logger.warning(f"Task with id {task_id} not found")
            return False
        self.set_tasks(remaining)
        return True

    def get_all_tags(self) -> List[str]:
        tags = set()
        for task in self.get_tasks():
            tags.update(task.tags)
        return sorted(tags)
