"""작업 집계(상태/우선순위/프로젝트/멤버별) 계산을 검증하는 테스트입니다."""

from datetime import datetime, timedelta

import pytest

from app.models.project import Project
from app.models.task import Task, Subtask
from app.models.user import User
from app.services import aggregation_service
from app.utils.errors import InvalidAggregationInput

NOW = datetime(2026, 3, 1, 12, 0, 0)


def _task(status="not_started", priority="medium", project_id=1, due_date=None, assignees=()):
    task = Task(title="t", status=status, priority=priority, project_id=project_id, due_date=due_date)
    task.assignees = list(assignees)
    return task


def test_priority_dimension_always_returns_four_rows_in_order():
    tasks = [
        _task(priority="low"),
        _task(priority="urgent", status="completed"),
        _task(priority="low", status="completed"),
    ]
    rows = aggregation_service.aggregate(tasks, "priority")

    assert [row["priority"] for row in rows] == ["urgent", "high", "medium", "low"]
    assert rows[1] == {"priority": "high", "total": 0, "completed": 0}
    assert rows[3] == {"priority": "low", "total": 2, "completed": 1}
    assert sum(row["total"] for row in rows) == len(tasks)


def test_unknown_priority_is_counted_as_medium():
    rows = aggregation_service.aggregate([_task(priority="critical"), _task(priority=None)], "priority")
    assert rows[2]["total"] == 2
    assert sum(row["total"] for row in rows) == 2


def test_completion_rate_rounds_half_up_and_handles_zero():
    assert aggregation_service.completion_rate(0, 0) == 0
    assert aggregation_service.completion_rate(1, 8) == 13
    assert aggregation_service.completion_rate(1, 3) == 33
    assert aggregation_service.completion_rate(2, 3) == 67
    assert aggregation_service.completion_rate(5, 5) == 100


def test_global_summary_counts_overdue_only_for_unfinished_tasks():
    past = NOW - timedelta(days=1)
    tasks = [
        _task(status="in_progress", due_date=past),
        _task(status="completed", due_date=past),
        _task(status="not_started", due_date=NOW + timedelta(days=1)),
        _task(status="completed"),
    ]
    summary = aggregation_service.aggregate(tasks, "global", now=NOW)

    assert summary == {
        "total": 4,
        "not_started": 1,
        "in_progress": 1,
        "completed": 2,
        "overdue": 1,
        "completion_rate": 50,
    }


def test_empty_task_set_yields_zero_summary():
    summary = aggregation_service.summarize([], NOW)
    assert summary["total"] == 0
    assert summary["completion_rate"] == 0


def test_status_dimension():
    rows = aggregation_service.aggregate([_task(), _task(status="completed")], "status")
    assert rows == [
        {"status": "not_started", "total": 1},
        {"status": "in_progress", "total": 0},
        {"status": "completed", "total": 1},
    ]


def test_project_dimension_keeps_scope_order_and_limit():
    projects = [Project(project_id=pid, name=f"P{pid}") for pid in (3, 1, 2)]
    tasks = [
        _task(project_id=1, status="completed"),
        _task(project_id=1, status="in_progress", due_date=NOW - timedelta(hours=1)),
        _task(project_id=3),
    ]
    rows = aggregation_service.aggregate(tasks, "project", projects=projects, project_limit=2, now=NOW)

    assert [row["project_id"] for row in rows] == [3, 1]
    assert rows[0]["total"] == 1
    assert rows[1] == {
        "project_id": 1,
        "project_name": "P1",
        "total": 2,
        "completed": 1,
        "in_progress": 1,
        "overdue": 1,
        "completion_rate": 50,
    }


def test_member_dimension_counts_tasks_by_assignee():
    alice = User(user_id=1, email="a@x.com", first_name="A", last_name="A")
    bob = User(user_id=2, email="b@x.com", first_name="B", last_name="B")
    tasks = [
        _task(status="completed", assignees=[alice, bob]),
        _task(status="not_started", assignees=[alice]),
    ]
    rows = aggregation_service.aggregate(tasks, "member", member_ids=[1, 2, 3], now=NOW)

    assert [(row["user_id"], row["total"], row["completed"]) for row in rows] == [(1, 2, 1), (2, 1, 1), (3, 0, 0)]
    assert rows[0]["completion_rate"] == 50
    assert rows[2]["completion_rate"] == 0


@pytest.mark.parametrize("dimension", ["", None, "weekday"])
def test_invalid_dimension_is_rejected(dimension):
    with pytest.raises(InvalidAggregationInput):
        aggregation_service.aggregate([], dimension)


def test_grouping_dimensions_require_grouping_input():
    with pytest.raises(InvalidAggregationInput):
        aggregation_service.aggregate([], "project")
    with pytest.raises(InvalidAggregationInput):
        aggregation_service.aggregate([], "member")


def test_task_completion_percentage_from_subtasks():
    task = _task(status="in_progress")
    task.subtasks = [Subtask(title=str(i), is_completed=i < 3) for i in range(4)]

    assert task.completion_percentage == 75
    assert task.is_overdue_at(NOW) is False


def test_task_completion_percentage_without_subtasks_follows_status():
    assert _task(status="completed").completion_percentage == 100
    assert _task(status="in_progress").completion_percentage == 0
