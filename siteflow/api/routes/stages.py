"""HTTP routes exposing the stage catalog and ad-hoc stage evaluation."""

from __future__ import annotations

from fastapi import APIRouter

from ...core.stages import DEFAULT_CATALOG, ProjectStagesReport, build_stage_report, coerce_tasks
from ...models.common import ResponseEnvelope
from ...models.stages import StageCatalogResponse, StageEvaluationRequest

router = APIRouter(prefix="/stages", tags=["stages"])


@router.get(
    "/catalog",
    response_model=ResponseEnvelope[StageCatalogResponse],
    summary="List execution stages in dependency order",
)
async def get_catalog() -> ResponseEnvelope[StageCatalogResponse]:
    payload = StageCatalogResponse(items=list(DEFAULT_CATALOG))
    return ResponseEnvelope.success_payload(payload)


@router.post(
    "/evaluate",
    response_model=ResponseEnvelope[ProjectStagesReport],
    summary="Evaluate stage progress for a supplied task snapshot",
)
async def evaluate_stages(
    request: StageEvaluationRequest,
) -> ResponseEnvelope[ProjectStagesReport]:
    """Compute stage statuses without touching stored tasks."""

    tasks, _ = coerce_tasks(request.tasks)
    report = build_stage_report(tasks, project_id=request.project_id, as_of=request.as_of)
    return ResponseEnvelope.success_payload(report)
