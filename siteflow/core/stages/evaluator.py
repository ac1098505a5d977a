"""Derive the completion and countdown status of a single stage."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable

from ...models.task import ExecutionTask, ensure_utc
from .types import CountdownStatus, StageCountdown, StageDefinition, StageInfo

_SECONDS_PER_DAY = 24 * 60 * 60


def stage_tasks(stage: StageDefinition, tasks: Iterable[ExecutionTask]) -> list[ExecutionTask]:
    """Return the tasks whose sequence position falls inside ``stage``."""

    return [task for task in tasks if stage.contains(task.order_index)]


def latest_completion(tasks: Iterable[ExecutionTask]) -> datetime | None:
    """Return the latest completion timestamp, skipping tasks that have none."""

    latest: datetime | None = None
    for task in tasks:
        if task.completed_date is None:
            continue
        if latest is None or task.completed_date > latest:
            latest = task.completed_date
    return latest


def days_elapsed(started_at: datetime, as_of: datetime) -> int:
    """Whole days between ``started_at`` and ``as_of``, floored and never negative."""

    seconds = (ensure_utc(as_of) - ensure_utc(started_at)).total_seconds()
    return max(0, math.floor(seconds / _SECONDS_PER_DAY))


def evaluate_stage(
    stage: StageDefinition,
    tasks: Iterable[ExecutionTask],
    previous: StageInfo | None,
    *,
    as_of: datetime,
) -> StageInfo:
    """Compute the status of ``stage`` for a project's task snapshot.

    A stage is completed when it has at least one task and all of them are
    completed. A timed stage only unlocks once ``previous`` is completed with
    a known completion time; its countdown starts at that moment and is
    measured against ``as_of``.
    """

    members = stage_tasks(stage, tasks)
    is_completed = bool(members) and all(task.is_completed for task in members)
    completed_at = latest_completion(members) if is_completed else None

    if not stage.has_timeline:
        return StageInfo(
            stage=stage,
            tasks=members,
            is_completed=is_completed,
            completed_at=completed_at,
            is_active=not is_completed,
            countdown=StageCountdown(
                days_left=None,
                started_at=None,
                is_overdue=False,
                status=CountdownStatus.COMPLETED if is_completed else CountdownStatus.NO_TIMELINE,
            ),
        )

    is_active = False
    started_at: datetime | None = None
    days_left = stage.days_allowed
    status = CountdownStatus.NOT_STARTED

    if is_completed:
        status = CountdownStatus.COMPLETED
        days_left = 0
    elif previous is not None and previous.is_completed and previous.completed_at is not None:
        is_active = True
        started_at = previous.completed_at
        days_left = max(0, stage.days_allowed - days_elapsed(started_at, as_of))
        status = CountdownStatus.OVERDUE if days_left <= 0 else CountdownStatus.IN_PROGRESS

    return StageInfo(
        stage=stage,
        tasks=members,
        is_completed=is_completed,
        completed_at=completed_at,
        is_active=is_active,
        countdown=StageCountdown(
            days_left=days_left,
            started_at=started_at,
            is_overdue=status == CountdownStatus.OVERDUE,
            status=status,
        ),
    )


__all__ = ["evaluate_stage", "stage_tasks", "latest_completion", "days_elapsed"]
