"""Shared Pydantic models used across the application."""

from .common import ErrorDetail, ResponseEnvelope
from .stages import StageCatalogResponse, StageEvaluationRequest
from .task import (
    ExecutionTask,
    ProjectProgress,
    TaskListResponse,
    TaskReplacePayload,
    TaskStatus,
    TaskStatusUpdate,
)

__all__ = (
    "ErrorDetail",
    "ResponseEnvelope",
    "StageCatalogResponse",
    "StageEvaluationRequest",
    "ExecutionTask",
    "ProjectProgress",
    "TaskListResponse",
    "TaskReplacePayload",
    "TaskStatus",
    "TaskStatusUpdate",
)
