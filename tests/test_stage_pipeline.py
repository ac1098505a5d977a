"""Tests for the project stage pipeline and its report."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from siteflow.core.stages import (
    CountdownStatus,
    build_stage_report,
    coerce_tasks,
    get_project_stages_info,
)
from siteflow.models.task import TaskStatus

T0 = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
T1 = T0 + timedelta(days=6)


def _by_id(stages):
    return {info.stage.id: info for info in stages}


def test_no_tasks_yields_every_stage_not_started() -> None:
    stages = get_project_stages_info([], as_of=T0)

    assert [info.stage.id for info in stages] == [
        "client_meeting",
        "pop",
        "furniture",
        "laminate",
        "colour",
        "other",
    ]
    assert all(info.is_completed is False for info in stages)
    assert stages[0].countdown.status == CountdownStatus.NO_TIMELINE
    assert [info.countdown.status for info in stages[1:]] == [CountdownStatus.NOT_STARTED] * 5
    assert [info.countdown.days_left for info in stages[1:]] == [8, 25, 30, 15, 12]
    assert not any(info.is_active for info in stages[1:])


def test_completed_client_meeting_unlocks_pop(completed_range) -> None:
    tasks = completed_range(1, 3, T0)
    stages = _by_id(get_project_stages_info(tasks, as_of=T0 + timedelta(days=3)))

    meeting = stages["client_meeting"]
    assert meeting.is_completed is True
    assert meeting.completed_at == T0
    assert meeting.countdown.status == CountdownStatus.COMPLETED

    pop = stages["pop"]
    assert pop.is_active is True
    assert pop.countdown.started_at == T0
    assert pop.countdown.days_left == 5
    assert pop.countdown.status == CountdownStatus.IN_PROGRESS

    furniture = stages["furniture"]
    assert furniture.is_active is False
    assert furniture.countdown.status == CountdownStatus.NOT_STARTED


def test_unlocked_stage_goes_overdue(completed_range) -> None:
    stages = _by_id(get_project_stages_info(completed_range(1, 3, T0), as_of=T0 + timedelta(days=10)))

    pop = stages["pop"]
    assert pop.countdown.days_left == 0
    assert pop.countdown.status == CountdownStatus.OVERDUE
    assert pop.countdown.is_overdue is True


def test_finishing_a_late_stage_marks_it_completed_and_unlocks_the_next(
    completed_range,
) -> None:
    late_finish = T0 + timedelta(days=12)
    tasks = completed_range(1, 3, T0) + completed_range(4, 9, late_finish)
    stages = _by_id(get_project_stages_info(tasks, as_of=late_finish + timedelta(days=5)))

    pop = stages["pop"]
    assert pop.is_completed is True
    assert pop.completed_at == late_finish
    assert pop.countdown.status == CountdownStatus.COMPLETED
    assert pop.countdown.days_left == 0

    furniture = stages["furniture"]
    assert furniture.is_active is True
    assert furniture.countdown.started_at == late_finish
    assert furniture.countdown.days_left == 20


def test_task_outside_every_range_is_ignored(completed_range, make_task) -> None:
    tasks = completed_range(1, 3, T0) + [make_task(40, TaskStatus.PENDING)]
    stages = get_project_stages_info(tasks, as_of=T0)

    assert all(task.order_index != 40 for info in stages for task in info.tasks)
    assert stages[0].is_completed is True
    assert stages[-1].tasks == []


def test_task_outside_every_range_is_logged(make_task, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="siteflow.core.stages.pipeline"):
        get_project_stages_info([make_task(0), make_task(12)], as_of=T0)

    records = [record for record in caplog.records if "outside every stage" in record.getMessage()]
    assert len(records) == 1
    assert records[0].task_ids == ["task-0"]


def test_unlock_depends_only_on_the_preceding_stage(completed_range, make_task) -> None:
    # Furniture work was signed off while POP is still open.
    tasks = (
        completed_range(1, 3, T0)
        + [make_task(4, TaskStatus.IN_PROGRESS)]
        + completed_range(10, 17, T1)
    )
    stages = get_project_stages_info(tasks, as_of=T1)
    active = [info.stage.id for info in stages if info.is_active]

    assert active == ["pop", "laminate"]
    assert _by_id(stages)["furniture"].countdown.status == CountdownStatus.COMPLETED
    laminate = _by_id(stages)["laminate"]
    assert laminate.is_active is True
    assert laminate.countdown.started_at == T1


def test_active_stage_requires_completed_predecessor(completed_range, make_task) -> None:
    tasks = completed_range(1, 3, T0) + completed_range(4, 9, T1) + [make_task(10)]
    stages = get_project_stages_info(tasks, as_of=T1 + timedelta(days=2))

    for previous, current in zip(stages, stages[1:]):
        if current.is_active:
            assert previous.is_completed is True
            assert previous.completed_at is not None


def test_pipeline_is_idempotent(completed_range, make_task) -> None:
    tasks = completed_range(1, 3, T0) + [make_task(4), make_task(40)]
    as_of = T0 + timedelta(days=4)

    assert get_project_stages_info(tasks, as_of=as_of) == get_project_stages_info(tasks, as_of=as_of)


def test_pipeline_accepts_unsorted_input(completed_range, make_task) -> None:
    tasks = completed_range(1, 3, T0) + [make_task(5), make_task(4)]
    stages = get_project_stages_info(list(reversed(tasks)), as_of=T0)
    assert {task.order_index for task in stages[1].tasks} == {4, 5}
    assert stages[1].is_active is True


def test_pipeline_defaults_to_current_time(completed_range) -> None:
    recently = datetime.now(timezone.utc) - timedelta(hours=1)
    stages = get_project_stages_info(completed_range(1, 3, recently))
    assert stages[1].countdown.days_left == 8


def test_stage_report_summarises_progress(completed_range, make_task) -> None:
    tasks = completed_range(1, 3, T0) + [make_task(4), make_task(99, id="stray")]
    report = build_stage_report(tasks, project_id="flat-42", as_of=T0 + timedelta(days=9))

    assert report.project_id == "flat-42"
    assert report.as_of == T0 + timedelta(days=9)
    assert len(report.stages) == 6
    assert report.current_stage == "pop"
    assert report.overdue_stages == ["pop"]
    assert report.unassigned_tasks == ["stray"]


def test_stage_report_starts_at_client_meeting() -> None:
    report = build_stage_report([], as_of=T0)
    assert report.current_stage == "client_meeting"
    assert report.overdue_stages == []
    assert report.unassigned_tasks == []


def test_coerce_tasks_skips_malformed_rows(caplog) -> None:
    rows = [
        {"id": "a", "project_id": "p", "name": "Site survey", "status": "completed",
         "order_index": 1, "completed_date": "2026-03-01T09:30:00Z", "updated_at": "2026-03-01T09:30:00Z"},
        {"id": "b", "status": "archived", "order_index": 2},
        {"project_id": "p", "order_index": 3},
        {"id": "c", "order_index": 4, "site_notes": "kept"},
    ]
    with caplog.at_level(logging.WARNING, logger="siteflow.core.stages.pipeline"):
        tasks, rejected = coerce_tasks(rows)

    assert [task.id for task in tasks] == ["a", "c"]
    assert tasks[0].completed_date == T0
    assert tasks[1].status == TaskStatus.PENDING
    assert tasks[1].model_extra == {"site_notes": "kept"}
    assert rejected == [rows[1], rows[2]]
    assert len([r for r in caplog.records if "malformed" in r.getMessage()]) == 2


def test_naive_completion_dates_are_treated_as_utc(make_task) -> None:
    naive = datetime(2026, 3, 1, 9, 30)
    tasks = [make_task(position, TaskStatus.COMPLETED, naive) for position in (1, 2, 3)]
    stages = get_project_stages_info(tasks, as_of=T0 + timedelta(days=1))

    assert stages[0].completed_at == T0
    assert stages[1].countdown.days_left == 7


def test_coerce_tasks_rejects_non_integer_positions() -> None:
    rows = [
        {"id": "flag", "status": "completed", "order_index": True,
         "completed_date": "2026-03-01T09:30:00Z"},
        {"id": "text", "status": "completed", "order_index": "2"},
        {"id": "ok", "status": "pending", "order_index": 3},
    ]
    tasks, rejected = coerce_tasks(rows)

    assert [task.id for task in tasks] == ["ok"]
    assert rejected == rows[:2]

    stages = get_project_stages_info(tasks, as_of=T0)
    assert stages[0].is_completed is False
    assert stages[1].is_active is False
