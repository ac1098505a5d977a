"""API schemas for stage catalog and evaluation endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ..core.stages.types import StageDefinition


class StageCatalogResponse(BaseModel):
    """Ordered list of the stages every project moves through."""

    items: list[StageDefinition] = Field(
        default_factory=list, description="Stage definitions in dependency order"
    )


class StageEvaluationRequest(BaseModel):
    """Ad-hoc evaluation of a task snapshot supplied by the caller."""

    project_id: str | None = Field(
        default=None, description="Optional project identifier echoed in the report"
    )
    tasks: list[Any] = Field(
        default_factory=list,
        description="Raw task rows; rows that fail validation are skipped",
    )
    as_of: datetime | None = Field(
        default=None, description="Evaluation time, defaults to the current time"
    )
