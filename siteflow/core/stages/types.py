"""Typed definitions for execution stages and their derived status."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from ...models.task import ExecutionTask


class CountdownStatus(StrEnum):
    """Countdown states reported for a single stage."""

    NO_TIMELINE = "no_timeline"
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class StageDefinition(BaseModel):
    """Static description of one execution stage."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable stage identifier")
    name: str = Field(..., description="Display name of the stage")
    order_range: tuple[int, int] = Field(
        ..., description="Inclusive bounds over task sequence positions"
    )
    days_allowed: int | None = Field(
        default=None,
        description="Days allotted once the stage unlocks, or None for no timeline",
    )
    color: str | None = Field(default=None, description="Presentation colour token")

    @property
    def lower(self) -> int:
        return self.order_range[0]

    @property
    def upper(self) -> int:
        return self.order_range[1]

    @property
    def has_timeline(self) -> bool:
        return self.days_allowed is not None

    def contains(self, position: int | None) -> bool:
        """Return whether ``position`` falls inside this stage's bounds."""

        if position is None:
            return False
        return self.lower <= position <= self.upper


class StageCountdown(BaseModel):
    """Remaining-time record for a stage."""

    days_left: int | None = Field(
        default=None, description="Whole days remaining, None for untimed stages"
    )
    started_at: datetime | None = Field(
        default=None, description="When the stage unlocked and its countdown began"
    )
    is_overdue: bool = Field(default=False, description="True when the budget ran out")
    status: CountdownStatus = Field(..., description="Countdown state")


class StageInfo(BaseModel):
    """Derived status of one stage for a project's current task snapshot."""

    stage: StageDefinition
    tasks: list[ExecutionTask] = Field(default_factory=list)
    is_completed: bool = False
    completed_at: datetime | None = None
    is_active: bool = False
    countdown: StageCountdown


class ProjectStagesReport(BaseModel):
    """Stage statuses for a project together with evaluation context."""

    project_id: str | None = Field(default=None, description="Project the tasks belong to")
    as_of: datetime = Field(..., description="Timestamp the countdowns were computed against")
    stages: list[StageInfo] = Field(
        default_factory=list, description="One status per catalog stage, in catalog order"
    )
    current_stage: str | None = Field(
        default=None, description="Identifier of the first active stage, if any"
    )
    overdue_stages: list[str] = Field(
        default_factory=list, description="Identifiers of stages past their budget"
    )
    unassigned_tasks: list[str] = Field(
        default_factory=list,
        description="Identifiers of tasks whose position matches no stage",
    )


__all__ = [
    "CountdownStatus",
    "StageDefinition",
    "StageCountdown",
    "StageInfo",
    "ProjectStagesReport",
]
