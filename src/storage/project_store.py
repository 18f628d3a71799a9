from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from focusflow.models import DEFAULT_PROJECT_IDS, Project
from focusflow.records import camel_keys
from storage.kv_store import KeyValueStore
from storage.task_store import TaskStore, generate_id

logger = logging.getLogger(__name__)

PROJECTS_KEY = "projects"


def default_projects(now: datetime) -> List[Project]:
    return [
        Project(id="personal", name="Personal", color="#3b82f6", created_at=now),
        Project(id="work", name="Work", color="#10b981", created_at=now),
    ]


class ProjectStore:
    def __init__(
        self,
        kv: KeyValueStore,
        task_store: TaskStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.kv = kv
        self.task_store = task_store
        self.clock = clock or datetime.now

    def initialize_defaults(self) -> None:
        if not self.get_projects():
            self.set_projects(default_projects(self.clock()))

    def _load(self) -> Tuple[List[Project], List[Any]]:
        records = self.kv.get(PROJECTS_KEY, [])
        projects, invalid = [], []
        for record in records if isinstance(records, list) else []:
            try:
                projects.append(Project.model_validate(record))
            except ValidationError as e:
                invalid.append(record)
                logger.debug(f"Invalid project record: {e}")
        return projects, invalid

    def get_projects(self) -> List[Project]:
        projects, invalid = self._load()
        if invalid:
            logger.warning(f"Skipping {len(invalid)} invalid project record(s)")
        return projects

    def set_projects(self, projects: List[Project], keep_invalid: bool = True) -> bool:
        records = [p.to_record() for p in projects]
        if keep_invalid:
            records.extend(self._load()[1])
        return self.kv.set(PROJECTS_KEY, records)

    def get_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.get_projects() if p.id == project_id), None)

    def add_project(self, data: Mapping[str, Any]) -> Project:
        project = Project(
            id=generate_id(),
            name=data.get("name") or "",
            color=data.get("color") or "#3b82f6",
            description=data.get("description") or "",
            created_at=self.clock(),
        )
        projects = self.get_projects()
        projects.append(project)
        self.set_projects(projects)
        return project

    def update_project(self, project_id: str, updates: Mapping[str, Any]) -> Optional[Project]:
        projects = self.get_projects()
        index = next((i for i, p in enumerate(projects) if p.id == project_id), None)
        if index is None:
            logger.warning(f"Project with id {project_id} not found")
            return None

        changes = {k: v for k, v in camel_keys(updates).items() if k != "id"}
        projects[index] = Project.model_validate({**projects[index].to_record(), **changes})
        self.set_projects(projects)
        return projects[index]

    def delete_project(self, project_id: str) -> bool:
        """Remove a project and detach its tasks. Default projects are kept."""
        if project_id in DEFAULT_PROJECT_IDS:
            logger.warning("Cannot delete default projects")
            return False

        projects = self.get_projects()
        remaining = [p for p in projects if p.id != project_id]
        if len(remaining) == len(projects):
            logger.warning(f"Project with id {project_id} not found")
            return False

        tasks = self.task_store.get_tasks()
        detached = [
            t.model_copy(update={"project_id": ""}) if t.project_id == project_id else t
            for t in tasks
        ]
        self.set_projects(remaining)
        self.task_store.set_tasks(detached)
        return True
