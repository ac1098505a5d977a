"""Execution task records and the API schemas built around them."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class TaskStatus(StrEnum):
    """Lifecycle states an execution task moves through."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC so comparisons never mix naive and aware values."""

    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class ExecutionTask(BaseModel):
    """A single site execution task as stored for a project.

    Unknown keys are preserved so rows coming from the task store round-trip
    without losing columns this service does not interpret.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Unique identifier for the task")
    project_id: str | None = Field(
        default=None, description="Identifier of the project owning the task"
    )
    name: str = Field(default="", description="Human readable task name")
    status: TaskStatus = Field(
        default=TaskStatus.PENDING, description="Current lifecycle status"
    )
    order_index: StrictInt | None = Field(
        default=None,
        description="Sequence position placing the task inside an execution stage",
    )
    completed_date: datetime | None = Field(
        default=None, description="Timestamp at which the task was completed"
    )
    updated_at: datetime | None = Field(
        default=None, description="Timestamp of the last modification"
    )

    @field_validator("completed_date", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


class TaskListResponse(BaseModel):
    """Container for listing the execution tasks of a project."""

    project_id: str = Field(..., description="Identifier of the project")
    items: list[ExecutionTask] = Field(
        default_factory=list, description="Tasks ordered by sequence position"
    )


class TaskReplacePayload(BaseModel):
    """Payload accepted when replacing the full task list of a project."""

    tasks: list[ExecutionTask] = Field(
        default_factory=list, description="Complete set of tasks for the project"
    )


class TaskStatusUpdate(BaseModel):
    """Payload accepted when changing the status of a single task."""

    status: TaskStatus = Field(..., description="New lifecycle status for the task")


class ProjectProgress(BaseModel):
    """Completion percentage for a project derived from its finished tasks."""

    project_id: str = Field(..., description="Identifier of the project")
    completed_tasks: int = Field(..., ge=0, description="Number of completed tasks")
    expected_tasks: int = Field(
        ..., gt=0, description="Task count corresponding to full completion"
    )
    progress: int = Field(..., ge=0, le=100, description="Rounded completion percentage")
