"""The fixed catalog of execution stages and position lookups over it."""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from .exceptions import (
    DuplicateStageError,
    EmptyCatalogError,
    InvalidStageBudgetError,
    InvalidStageRangeError,
)
from .types import StageDefinition


def validate_catalog(stages: Iterable[StageDefinition]) -> tuple[StageDefinition, ...]:
    """Check catalog invariants and return the stages as an immutable tuple.

    Ranges must be well formed and, taken in catalog order, contiguous and
    non-overlapping. Allotted days must be positive when present.
    """

    ordered = tuple(stages)
    if not ordered:
        raise EmptyCatalogError()

    seen: set[str] = set()
    previous: StageDefinition | None = None
    for stage in ordered:
        if stage.id in seen:
            raise DuplicateStageError(stage.id)
        seen.add(stage.id)

        if stage.lower > stage.upper:
            raise InvalidStageRangeError(
                f"Stage '{stage.id}' has an inverted range",
                details={"stage_id": stage.id, "order_range": list(stage.order_range)},
            )
        if previous is not None and stage.lower != previous.upper + 1:
            raise InvalidStageRangeError(
                f"Stage '{stage.id}' does not start right after '{previous.id}'",
                details={
                    "stage_id": stage.id,
                    "previous_stage_id": previous.id,
                    "expected_lower": previous.upper + 1,
                    "actual_lower": stage.lower,
                },
            )
        if stage.days_allowed is not None and stage.days_allowed <= 0:
            raise InvalidStageBudgetError(stage.id, stage.days_allowed)
        previous = stage

    return ordered


EXECUTION_STAGES: tuple[StageDefinition, ...] = validate_catalog(
    (
        StageDefinition(
            id="client_meeting",
            name="Client Meeting",
            order_range=(1, 3),
            days_allowed=None,
            color="bg-slate-500",
        ),
        StageDefinition(
            id="pop", name="POP Stage", order_range=(4, 9), days_allowed=8, color="bg-blue-500"
        ),
        StageDefinition(
            id="furniture",
            name="Furniture Stage",
            order_range=(10, 17),
            days_allowed=25,
            color="bg-amber-500",
        ),
        StageDefinition(
            id="laminate",
            name="Laminate Work",
            order_range=(18, 22),
            days_allowed=30,
            color="bg-purple-500",
        ),
        StageDefinition(
            id="colour",
            name="Colour Work",
            order_range=(23, 28),
            days_allowed=15,
            color="bg-pink-500",
        ),
        StageDefinition(
            id="other", name="Other Work", order_range=(29, 35), days_allowed=12, color="bg-teal-500"
        ),
    )
)


class StageCatalog(Sequence[StageDefinition]):
    """Ordered, read-only stage catalog with constant time position lookup."""

    def __init__(self, stages: Iterable[StageDefinition]) -> None:
        self._stages = validate_catalog(stages)
        self._by_id = {stage.id: stage for stage in self._stages}
        self._by_position = {
            position: stage
            for stage in self._stages
            for position in range(stage.lower, stage.upper + 1)
        }

    def __getitem__(self, index):  # type: ignore[override]
        return self._stages[index]

    def __len__(self) -> int:
        return len(self._stages)

    def __iter__(self) -> Iterator[StageDefinition]:
        return iter(self._stages)

    @property
    def span(self) -> tuple[int, int]:
        """First and last sequence positions covered by the catalog."""

        return self._stages[0].lower, self._stages[-1].upper

    def get(self, stage_id: str) -> StageDefinition | None:
        return self._by_id.get(stage_id)

    def resolve(self, position: int | None) -> StageDefinition | None:
        """Return the stage whose range contains ``position``, or None."""

        if position is None:
            return None
        return self._by_position.get(position)


DEFAULT_CATALOG = StageCatalog(EXECUTION_STAGES)


def resolve_stage(
    position: int | None, catalog: StageCatalog = DEFAULT_CATALOG
) -> StageDefinition | None:
    """Map a task's sequence position to the stage it belongs to."""

    return catalog.resolve(position)


__all__ = [
    "EXECUTION_STAGES",
    "DEFAULT_CATALOG",
    "StageCatalog",
    "resolve_stage",
    "validate_catalog",
]
