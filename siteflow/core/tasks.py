"""Filesystem-backed repository for project execution tasks."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Sequence

from ..models.task import ExecutionTask, ProjectProgress, TaskStatus, ensure_utc
from .settings import Settings

logger = logging.getLogger(__name__)

_TASKS_FILENAME = "execution_tasks.json"
_STORE_LOCK = RLock()
_IDENTIFIER_PATTERN = re.compile(r"^[a-z0-9][a-z0-9\-_]{0,127}$")


class TaskStoreError(Exception):
    """Base exception for task repository errors."""

    def __init__(self, message: str, *, code: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details


class InvalidProjectIdentifierError(TaskStoreError):
    """Raised when a project identifier cannot be mapped to a safe location."""

    def __init__(self, message: str, *, project_id: str) -> None:
        super().__init__(
            message, code="invalid_project_identifier", details={"project_id": project_id}
        )


class ProjectNotFoundError(TaskStoreError):
    """Raised when no task list has been stored for a project."""

    def __init__(self, project_id: str) -> None:
        super().__init__(
            f"Project '{project_id}' has no execution tasks.",
            code="project_not_found",
            details={"project_id": project_id},
        )


class TaskNotFoundError(TaskStoreError):
    """Raised when a task identifier is unknown within a project."""

    def __init__(self, project_id: str, task_id: str) -> None:
        super().__init__(
            f"Task '{task_id}' was not found in project '{project_id}'.",
            code="task_not_found",
            details={"project_id": project_id, "task_id": task_id},
        )


def _sort_key(task: ExecutionTask) -> tuple[bool, int]:
    return task.order_index is None, task.order_index or 0


class ExecutionTasksRepository:
    """Repository persisting each project's execution tasks as a JSON document."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._projects_dir = settings.paths.projects_dir
        self._projects_dir.mkdir(parents=True, exist_ok=True)
        self._lock = _STORE_LOCK

    @property
    def base_path(self) -> Path:
        return self._projects_dir

    def list_tasks(self, project_id: str) -> list[ExecutionTask]:
        """Return the project's tasks ordered by sequence position."""

        path = self._tasks_path(project_id)
        with self._lock:
            tasks = self._load_locked(path)
        return sorted(tasks, key=_sort_key)

    def replace_tasks(
        self, project_id: str, tasks: Sequence[ExecutionTask]
    ) -> list[ExecutionTask]:
        """Store ``tasks`` as the complete task list for the project."""

        path = self._tasks_path(project_id)
        slug = path.parent.name
        owned = [task.model_copy(update={"project_id": slug}) for task in tasks]
        with self._lock:
            self._persist_locked(path, owned)
        logger.info("Stored execution tasks", extra={"project_id": slug, "count": len(owned)})
        return sorted(owned, key=_sort_key)

    def update_task_status(
        self,
        project_id: str,
        task_id: str,
        status: TaskStatus,
        *,
        now: datetime | None = None,
    ) -> ExecutionTask:
        """Change a task's status, stamping or clearing its completion time."""

        moment = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
        path = self._tasks_path(project_id)
        with self._lock:
            tasks = self._load_locked(path)
            for position, task in enumerate(tasks):
                if task.id == task_id:
                    break
            else:
                raise TaskNotFoundError(path.parent.name, task_id)

            changes: dict[str, object] = {"status": status, "updated_at": moment}
            if status == TaskStatus.COMPLETED:
                if task.completed_date is None:
                    changes["completed_date"] = moment
            else:
                changes["completed_date"] = None

            updated = task.model_copy(update=changes)
            tasks[position] = updated
            self._persist_locked(path, tasks)

        logger.info(
            "Updated execution task status",
            extra={"project_id": path.parent.name, "task_id": task_id, "status": status.value},
        )
        return updated

    def project_progress(self, project_id: str) -> ProjectProgress:
        """Return the rounded completion percentage for the project.

        Only execution tasks are counted. Design tasks are tracked outside this
        store, so a project whose design work was counted elsewhere reaches
        100% only through ``expected_task_total`` execution tasks.
        """

        tasks = self.list_tasks(project_id)
        completed = sum(1 for task in tasks if task.is_completed)
        expected = self._settings.expected_task_total
        progress = min(100, round(completed / expected * 100))
        return ProjectProgress(
            project_id=self.normalise_identifier(project_id),
            completed_tasks=completed,
            expected_tasks=expected,
            progress=progress,
        )

    def normalise_identifier(self, identifier: str) -> str:
        """Return the lower-case slug under which a project's tasks are stored."""

        cleaned = identifier.strip().lower()
        if not cleaned:
            raise InvalidProjectIdentifierError(
                "Project identifier cannot be empty.", project_id=identifier
            )
        if not _IDENTIFIER_PATTERN.fullmatch(cleaned):
            raise InvalidProjectIdentifierError(
                "Project identifier contains unsupported characters.", project_id=identifier
            )
        return cleaned

    # Internal helpers -----------------------------------------------------

    def _load_locked(self, path: Path) -> list[ExecutionTask]:
        if not path.exists():
            raise ProjectNotFoundError(path.parent.name)
        raw = json.loads(path.read_text(encoding="utf-8"))
        return [ExecutionTask.model_validate(item) for item in raw.get("tasks", [])]

    def _persist_locked(self, path: Path, tasks: Sequence[ExecutionTask]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        serialized = {"tasks": [task.model_dump(mode="json") for task in tasks]}
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(serialized, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(path)

    def _tasks_path(self, project_id: str) -> Path:
        slug = self.normalise_identifier(project_id)
        project_dir = (self._projects_dir / slug).resolve()
        self._assert_within_base(project_dir, project_id)
        return project_dir / _TASKS_FILENAME

    def _assert_within_base(self, path: Path, project_id: str) -> None:
        base = self._projects_dir.resolve()
        try:
            path.relative_to(base)
        except ValueError as exc:
            raise InvalidProjectIdentifierError(
                "Resolved path escapes the projects directory.", project_id=project_id
            ) from exc


__all__ = [
    "ExecutionTasksRepository",
    "TaskStoreError",
    "InvalidProjectIdentifierError",
    "ProjectNotFoundError",
    "TaskNotFoundError",
]
