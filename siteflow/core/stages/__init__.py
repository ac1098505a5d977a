"""Public interface for the execution stage engine."""

from .catalog import (
    DEFAULT_CATALOG,
    EXECUTION_STAGES,
    StageCatalog,
    resolve_stage,
    validate_catalog,
)
from .evaluator import evaluate_stage
from .exceptions import (
    DuplicateStageError,
    EmptyCatalogError,
    InvalidStageBudgetError,
    InvalidStageRangeError,
    StageCatalogError,
)
from .pipeline import (
    build_stage_report,
    coerce_tasks,
    get_project_stages_info,
    unassigned_tasks,
)
from .types import (
    CountdownStatus,
    ProjectStagesReport,
    StageCountdown,
    StageDefinition,
    StageInfo,
)

__all__ = [
    "EXECUTION_STAGES",
    "DEFAULT_CATALOG",
    "StageCatalog",
    "resolve_stage",
    "validate_catalog",
    "evaluate_stage",
    "get_project_stages_info",
    "build_stage_report",
    "coerce_tasks",
    "unassigned_tasks",
    "CountdownStatus",
    "StageDefinition",
    "StageCountdown",
    "StageInfo",
    "ProjectStagesReport",
    "StageCatalogError",
    "EmptyCatalogError",
    "DuplicateStageError",
    "InvalidStageRangeError",
    "InvalidStageBudgetError",
]
