"""Custom exceptions raised while building the stage catalog."""

from __future__ import annotations

from typing import Any


class StageCatalogError(ValueError):
    """Raised when a stage catalog violates its structural invariants."""

    def __init__(self, message: str, *, code: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details


class EmptyCatalogError(StageCatalogError):
    """Raised when a catalog defines no stages at all."""

    def __init__(self) -> None:
        super().__init__("Stage catalog must define at least one stage", code="stages.empty_catalog")


class DuplicateStageError(StageCatalogError):
    """Raised when two stages share an identifier."""

    def __init__(self, stage_id: str) -> None:
        super().__init__(
            f"Stage identifier '{stage_id}' is defined more than once",
            code="stages.duplicate_stage",
            details={"stage_id": stage_id},
        )


class InvalidStageRangeError(StageCatalogError):
    """Raised when a stage's bounds are inverted or break contiguity."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, code="stages.invalid_range", details=details)


class InvalidStageBudgetError(StageCatalogError):
    """Raised when a stage's allotted days are not a positive integer."""

    def __init__(self, stage_id: str, days_allowed: int) -> None:
        super().__init__(
            f"Stage '{stage_id}' must allot a positive number of days",
            code="stages.invalid_budget",
            details={"stage_id": stage_id, "days_allowed": days_allowed},
        )


__all__ = [
    "StageCatalogError",
    "EmptyCatalogError",
    "DuplicateStageError",
    "InvalidStageRangeError",
    "InvalidStageBudgetError",
]
