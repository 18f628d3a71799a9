from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from extraction.task_parser import InputSuggestions, TaskInputParser
from focusflow import config
from focusflow.logging_setup import configure_logging
from focusflow.metrics import TASK_MUTATIONS_TOTAL
from focusflow.models import (
    Project,
    Settings,
    SortBy,
    Task,
    TaskFilters,
    TaskStats,
    View,
)
from query.engine import compute_stats, query_tasks
from scheduling.dates import format_due_date, relative_time
from storage.kv_store import KeyValueStore
from storage.preferences_store import FILTERS_KEY, SETTINGS_KEY, PreferencesStore
from storage.project_store import PROJECTS_KEY, ProjectStore
from storage.task_store import TASKS_KEY, TaskStore

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


class FocusFlowApp:
    """Central orchestration component: stores, parser and query engine.

    Every collaborator is an explicit instance owned by this object; nothing
    is shared through module globals, so several apps (or tests) can run side
    by side against different data directories.
    """

    def __init__(
        self,
        data_dir: str = config.DATA_DIR,
        clock: Optional[Callable[[], datetime]] = None,
        kv: Optional[KeyValueStore] = None,
        parser: Optional[TaskInputParser] = None,
    ):
        configure_logging()
        self.clock = clock or datetime.now
        self.kv = kv or KeyValueStore(directory=data_dir)
        self.tasks = TaskStore(self.kv, clock=self.clock)
        self.projects = ProjectStore(self.kv, self.tasks, clock=self.clock)
        self.preferences = PreferencesStore(self.kv)
        self.parser = parser or TaskInputParser()

        self.projects.initialize_defaults()
        self.preferences.initialize_defaults()

    # --- tasks ---------------------------------------------------------

    def quick_add(
        self,
        text: str,
        project_id: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[datetime] = None,
        tags: Optional[List[str]] = None,
    ) -> Optional[Task]:
        """Create a task from free text.

        Explicit arguments win over what the parser detected; parser values
        fill in whatever the caller left empty.
        """
        text = (text or "").strip()
        if not text:
            return None

        parsed = self.parser.parse(text, now=self.clock())
        return self.create_task(
            {
                "title": parsed.title or text,
                "project_id": project_id or parsed.project_id,
                "priority": priority or parsed.priority,
                "due_date": due_date or parsed.due_date,
                "tags": tags if tags else parsed.tags,
                "recurring": self.parser.parse_recurring(text),
            }
        )

    def create_task(self, data: Mapping[str, Any]) -> Task:
        task = self.tasks.add_task(data)
        TASK_MUTATIONS_TOTAL.labels(action="create").inc()
        logger.info(f"Task created: {task.id}")
        return task

    def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Optional[Task]:
        task = self.tasks.update_task(task_id, updates)
        if task is not None:
            TASK_MUTATIONS_TOTAL.labels(action="update").inc()
            logger.info(f"Task updated: {task_id}")
        return task

    def toggle_task_completion(self, task_id: str) -> Optional[Task]:
        task = self.tasks.get_task(task_id)
        if task is None:
            return None
        return self.update_task(task_id, {"completed": not task.completed})

    def delete_task(self, task_id: str) -> bool:
        deleted = self.tasks.delete_task(task_id)
        if deleted:
            TASK_MUTATIONS_TOTAL.labels(action="delete").inc()
            logger.info(f"Task deleted: {task_id}")
        return deleted

    def suggest(self, text: str) -> InputSuggestions:
        return self.parser.generate_suggestions(text, self.tasks.get_tasks())

    def display_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        """Stored record of a task plus human-readable due and age labels."""
        task = self.tasks.get_task(task_id)
        if task is None:
            return None
        now = self.clock()
        return {
            **task.to_record(),
            "dueLabel": format_due_date(task.due_date, now),
            "createdLabel": relative_time(task.created_at, now),
        }

    # --- views, filters, sorting ----------------------------------------

    def get_filtered_tasks(self) -> List[Task]:
        settings = self.preferences.load()
        return query_tasks(
            self.tasks.get_tasks(),
            view=settings.current_view,
            filters=self.preferences.get_filters(),
            sort_by=settings.sort_by,
            now=self.clock(),
        )

    def set_view(self, view: Union[View, str]) -> None:
        self.preferences.update_setting("current_view", View(view))

    def set_project_view(self, project_id: str) -> None:
        self.preferences.update_setting("current_view", View.PROJECT)
        self.preferences.update_filter("project", project_id)

    def update_filters(self, **changes: Any) -> TaskFilters:
        current = self.preferences.get_filters()
        filters = TaskFilters.model_validate({**current.model_dump(), **changes})
        self.preferences.set_filters(filters)
        return filters

    def clear_filters(self) -> None:
        self.preferences.clear_filters()

    def set_sort_by(self, sort_by: Union[SortBy, str]) -> None:
        self.preferences.update_setting("sort_by", SortBy(sort_by))

    def search_tasks(self, query: str) -> List[Task]:
        self.update_filters(search=query)
        return self.get_filtered_tasks()

    def get_stats(self) -> TaskStats:
        return compute_stats(self.tasks.get_tasks(), now=self.clock())

    # --- projects -------------------------------------------------------

    def create_project(self, data: Mapping[str, Any]) -> Project:
        project = self.projects.add_project(data)
        logger.info(f"Project created: {project.id}")
        return project

    def update_project(self, project_id: str, updates: Mapping[str, Any]) -> Optional[Project]:
        return self.projects.update_project(project_id, updates)

    def delete_project(self, project_id: str) -> bool:
        deleted = self.projects.delete_project(project_id)
        if deleted:
            logger.info(f"Project deleted: {project_id}")
            settings = self.preferences.load()
            filters = self.preferences.get_filters()
            if settings.current_view == View.PROJECT.value and filters.project == project_id:
                self.set_view(View.TODAY)
                self.preferences.update_filter("project", "")
        return deleted

    def get_project_stats(self, project_id: str) -> TaskStats:
        tasks = [t for t in self.tasks.get_tasks() if t.project_id == project_id]
        return compute_stats(tasks, now=self.clock())

    def get_all_project_stats(self) -> List[Dict[str, Any]]:
        return [
            {**project.to_record(), "stats": self.get_project_stats(project.id).to_record()}
            for project in self.projects.get_projects()
        ]

    def export_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        project = self.projects.get_project(project_id)
        if project is None:
            return None
        return {
            "project": project.to_record(),
            "tasks": [t.to_record() for t in self.tasks.get_tasks() if t.project_id == project_id],
            "exportedAt": self.clock().isoformat(),
        }

    def import_project(self, bundle: Mapping[str, Any]) -> Optional[Project]:
        """Recreate an exported project under a new id, with copies of its tasks."""
        source = bundle.get("project")
        if not source:
            return None
        project = self.create_project(
            {
                "name": f"{source.get('name', '')} (Imported)",
                "description": source.get("description"),
                "color": source.get("color"),
            }
        )
        for record in bundle.get("tasks") or []:
            data = {
                k: v for k, v in record.items()
                if k not in {"id", "createdAt", "updatedAt", "completedAt", "completed"}
            }
            data["projectId"] = project.id
            self.create_task(data)
        return project

    # --- whole-store maintenance ----------------------------------------

    def export_data(self) -> Dict[str, Any]:
        return {
            "tasks": [t.to_record() for t in self.tasks.get_tasks()],
            "projects": [p.to_record() for p in self.projects.get_projects()],
            "settings": self.preferences.load().to_record(),
            "exportedAt": self.clock().isoformat(),
            "version": EXPORT_VERSION,
        }

    def import_data(self, data: Mapping[str, Any]) -> bool:
        """Replace stored data with an export. Nothing is written if any part is invalid."""
        try:
            tasks = [Task.model_validate(t) for t in data.get("tasks") or []]
            projects = [Project.model_validate(p) for p in data.get("projects") or []]
            settings = Settings.model_validate(data["settings"]) if data.get("settings") else None
        except (ValidationError, AttributeError, TypeError) as e:
            logger.error(f"Failed to import data: {e}")
            return False

        if data.get("tasks") is not None:
            self.tasks.set_tasks(tasks, keep_invalid=False)
        if data.get("projects") is not None:
            self.projects.set_projects(projects, keep_invalid=False)
        if settings is not None:
            self.preferences.save(settings)
        return True

    def clear_all_data(self) -> None:
        for key in (TASKS_KEY, PROJECTS_KEY, SETTINGS_KEY, FILTERS_KEY):
            self.kv.remove(key)
        self.projects.initialize_defaults()
        self.preferences.initialize_defaults()

    def verify_data_integrity(self) -> int:
        """Detach tasks that point at projects which no longer exist.

        Returns the number of tasks that were repaired.
        """
        project_ids = {p.id for p in self.projects.get_projects()}
        orphaned = [t for t in self.tasks.get_tasks() if t.project_id and t.project_id not in project_ids]
        if orphaned:
            logger.warning(f"Found {len(orphaned)} orphaned tasks, cleaning up...")
            for task in orphaned:
                self.tasks.update_task(task.id, {"project_id": ""})
        return len(orphaned)

    def get_status(self) -> Dict[str, Any]:
        usage = self.kv.usage((TASKS_KEY, PROJECTS_KEY, SETTINGS_KEY, FILTERS_KEY))
        return {
            "version": config.APP_VERSION,
            "notifications_enabled": self.preferences.load().notifications,
            "tasks_count": len(self.tasks.get_records()),
            "projects_count": len(self.projects.get_projects()),
            "storage_usage": {"individual": usage, "total": sum(usage.values())},
        }
