"""Evaluate every catalog stage for a project's tasks in dependency order."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from ...models.task import ExecutionTask, ensure_utc
from .catalog import DEFAULT_CATALOG, StageCatalog
from .evaluator import evaluate_stage
from .types import CountdownStatus, ProjectStagesReport, StageInfo

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_tasks(
    records: Iterable[ExecutionTask | Mapping[str, Any]],
) -> tuple[list[ExecutionTask], list[Any]]:
    """Validate raw task rows, returning the usable tasks and the rejected rows."""

    tasks: list[ExecutionTask] = []
    rejected: list[Any] = []
    for record in records:
        if isinstance(record, ExecutionTask):
            tasks.append(record)
            continue
        try:
            tasks.append(ExecutionTask.model_validate(record))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed execution task",
                extra={"record": record, "errors": exc.error_count()},
            )
            rejected.append(record)
    return tasks, rejected


def unassigned_tasks(
    tasks: Iterable[ExecutionTask], catalog: StageCatalog = DEFAULT_CATALOG
) -> list[ExecutionTask]:
    """Return tasks whose sequence position matches no catalog stage."""

    return [task for task in tasks if catalog.resolve(task.order_index) is None]


def get_project_stages_info(
    tasks: Sequence[ExecutionTask],
    *,
    as_of: datetime | None = None,
    catalog: StageCatalog = DEFAULT_CATALOG,
) -> list[StageInfo]:
    """Return one status per catalog stage, each fed the previous stage's result."""

    moment = ensure_utc(as_of) if as_of is not None else _now()

    orphans = unassigned_tasks(tasks, catalog)
    if orphans:
        logger.warning(
            "Execution tasks fall outside every stage range",
            extra={
                "task_ids": [task.id for task in orphans],
                "order_indexes": [task.order_index for task in orphans],
                "catalog_span": catalog.span,
            },
        )

    stages: list[StageInfo] = []
    previous: StageInfo | None = None
    for stage in catalog:
        info = evaluate_stage(stage, tasks, previous, as_of=moment)
        stages.append(info)
        previous = info
    return stages


def build_stage_report(
    tasks: Sequence[ExecutionTask],
    *,
    project_id: str | None = None,
    as_of: datetime | None = None,
    catalog: StageCatalog = DEFAULT_CATALOG,
) -> ProjectStagesReport:
    """Evaluate the pipeline and summarise it for API consumers."""

    moment = ensure_utc(as_of) if as_of is not None else _now()
    stages = get_project_stages_info(tasks, as_of=moment, catalog=catalog)
    current = next((info.stage.id for info in stages if info.is_active), None)
    return ProjectStagesReport(
        project_id=project_id,
        as_of=moment,
        stages=stages,
        current_stage=current,
        overdue_stages=[
            info.stage.id for info in stages if info.countdown.status == CountdownStatus.OVERDUE
        ],
        unassigned_tasks=[task.id for task in unassigned_tasks(tasks, catalog)],
    )


__all__ = [
    "coerce_tasks",
    "unassigned_tasks",
    "get_project_stages_info",
    "build_stage_report",
]
