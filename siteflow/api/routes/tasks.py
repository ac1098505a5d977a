"""HTTP routes for project execution tasks and their stage progress."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ...core.settings import Settings, get_settings
from ...core.stages import ProjectStagesReport, build_stage_report
from ...core.tasks import (
    ExecutionTasksRepository,
    InvalidProjectIdentifierError,
    ProjectNotFoundError,
    TaskNotFoundError,
    TaskStoreError,
)
from ...models.common import ResponseEnvelope
from ...models.task import (
    ExecutionTask,
    ProjectProgress,
    TaskListResponse,
    TaskReplacePayload,
    TaskStatusUpdate,
)

router = APIRouter(prefix="/projects", tags=["tasks"])


def get_repository(settings: Settings = Depends(get_settings)) -> ExecutionTasksRepository:
    return ExecutionTasksRepository(settings=settings)


def _error_response(status_code: int, exc: TaskStoreError) -> JSONResponse:
    envelope = ResponseEnvelope.from_exception(exc)
    return JSONResponse(
        status_code=status_code, content=envelope.model_dump(mode="json")
    )


def _invalid_identifier(exc: InvalidProjectIdentifierError) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


def _project_not_found(exc: ProjectNotFoundError) -> JSONResponse:
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@router.get(
    "/{project_id}/tasks",
    response_model=ResponseEnvelope[TaskListResponse],
    summary="List a project's execution tasks",
)
async def list_tasks(
    project_id: str,
    repository: ExecutionTasksRepository = Depends(get_repository),
) -> ResponseEnvelope[TaskListResponse] | JSONResponse:
    try:
        tasks = repository.list_tasks(project_id)
    except InvalidProjectIdentifierError as exc:
        return _invalid_identifier(exc)
    except ProjectNotFoundError as exc:
        return _project_not_found(exc)

    payload = TaskListResponse(
        project_id=repository.normalise_identifier(project_id), items=tasks
    )
    return ResponseEnvelope.success_payload(payload)


@router.put(
    "/{project_id}/tasks",
    response_model=ResponseEnvelope[TaskListResponse],
    summary="Replace a project's execution tasks",
)
async def replace_tasks(
    project_id: str,
    payload: TaskReplacePayload,
    repository: ExecutionTasksRepository = Depends(get_repository),
) -> ResponseEnvelope[TaskListResponse] | JSONResponse:
    try:
        tasks = repository.replace_tasks(project_id, payload.tasks)
    except InvalidProjectIdentifierError as exc:
        return _invalid_identifier(exc)

    return ResponseEnvelope.success_payload(
        TaskListResponse(project_id=repository.normalise_identifier(project_id), items=tasks)
    )


@router.patch(
    "/{project_id}/tasks/{task_id}",
    response_model=ResponseEnvelope[ExecutionTask],
    summary="Change the status of a single task",
)
async def update_task_status(
    project_id: str,
    task_id: str,
    payload: TaskStatusUpdate,
    repository: ExecutionTasksRepository = Depends(get_repository),
) -> ResponseEnvelope[ExecutionTask] | JSONResponse:
    try:
        task = repository.update_task_status(project_id, task_id, payload.status)
    except InvalidProjectIdentifierError as exc:
        return _invalid_identifier(exc)
    except ProjectNotFoundError as exc:
        return _project_not_found(exc)
    except TaskNotFoundError as exc:
        return _error_response(status.HTTP_404_NOT_FOUND, exc)

    return ResponseEnvelope.success_payload(task)


@router.get(
    "/{project_id}/stages",
    response_model=ResponseEnvelope[ProjectStagesReport],
    summary="Compute execution stage progress for stored tasks",
)
async def get_project_stages(
    project_id: str,
    as_of: datetime | None = Query(
        default=None, description="Evaluation time, defaults to the current time"
    ),
    repository: ExecutionTasksRepository = Depends(get_repository),
) -> ResponseEnvelope[ProjectStagesReport] | JSONResponse:
    try:
        tasks = repository.list_tasks(project_id)
    except InvalidProjectIdentifierError as exc:
        return _invalid_identifier(exc)
    except ProjectNotFoundError as exc:
        return _project_not_found(exc)

    report = build_stage_report(
        tasks, project_id=repository.normalise_identifier(project_id), as_of=as_of
    )
    return ResponseEnvelope.success_payload(report)


@router.get(
    "/{project_id}/progress",
    response_model=ResponseEnvelope[ProjectProgress],
    summary="Report a project's completion percentage",
)
async def get_project_progress(
    project_id: str,
    repository: ExecutionTasksRepository = Depends(get_repository),
) -> ResponseEnvelope[ProjectProgress] | JSONResponse:
    try:
        progress = repository.project_progress(project_id)
    except InvalidProjectIdentifierError as exc:
        return _invalid_identifier(exc)
    except ProjectNotFoundError as exc:
        return _project_not_found(exc)

    return ResponseEnvelope.success_payload(progress)
