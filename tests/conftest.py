from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest
from fastapi.testclient import TestClient

import siteflow.core.settings as settings_module
from siteflow.main import create_application
from siteflow.models.task import ExecutionTask, TaskStatus

T0 = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

TaskFactory = Callable[..., ExecutionTask]


def days(count: float) -> timedelta:
    return timedelta(days=count)


@pytest.fixture()
def make_task() -> TaskFactory:
    def _factory(
        order_index: int | None,
        status: TaskStatus | str = TaskStatus.PENDING,
        completed_date: datetime | None = None,
        **extra: Any,
    ) -> ExecutionTask:
        return ExecutionTask(
            id=extra.pop("id", f"task-{order_index}"),
            project_id=extra.pop("project_id", "flat-42"),
            name=extra.pop("name", f"Task {order_index}"),
            status=status,
            order_index=order_index,
            completed_date=completed_date,
            updated_at=extra.pop("updated_at", T0),
            **extra,
        )

    return _factory


@pytest.fixture()
def completed_range(make_task: TaskFactory) -> Callable[..., list[ExecutionTask]]:
    """Build completed tasks for an inclusive position range, the last one finishing at ``finished_at``."""

    def _build(lower: int, upper: int, finished_at: datetime) -> list[ExecutionTask]:
        tasks = []
        for position in range(lower, upper + 1):
            offset = days(upper - position)
            tasks.append(make_task(position, TaskStatus.COMPLETED, finished_at - offset))
        return tasks

    return _build


@pytest.fixture()
def runtime_environment(tmp_path, monkeypatch) -> Path:
    base_dir = tmp_path / "runtime"
    data_dir = base_dir / "data"
    monkeypatch.setenv("APP_BASE_DIR", str(base_dir))
    monkeypatch.setenv("APP_DATA_DIR", str(data_dir))
    return base_dir


@pytest.fixture()
def client(runtime_environment: Path) -> Iterator[TestClient]:
    settings_module.get_settings.cache_clear()
    application = create_application()

    with TestClient(application) as test_client:
        yield test_client
    settings_module.get_settings.cache_clear()
