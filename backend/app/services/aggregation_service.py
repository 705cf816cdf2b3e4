"""작업 집합에 대한 집계(상태/우선순위/프로젝트/멤버별)를 계산하는 도메인 서비스입니다.

입력으로 받은 작업 목록만 읽으며 저장소에는 접근하지 않는다. 가시 범위 판정은
호출자가 끝낸 상태여야 한다.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from app.models.project import Project
from app.models.task import Task, round_percent
from app.utils.errors import InvalidAggregationInput


STATUSES = ("not_started", "in_progress", "completed")
PRIORITY_ORDER = ("urgent", "high", "medium", "low")
DEFAULT_PRIORITY = "medium"
DIMENSIONS = ("global", "status", "priority", "project", "member")


def validate_dimension(dimension: Optional[str]) -> str:
    text = str(dimension or "").strip().lower()
    if not text:
        raise InvalidAggregationInput("집계 기준이 비어 있습니다.")
    if text not in DIMENSIONS:
        raise InvalidAggregationInput(f"지원하지 않는 집계 기준입니다: {text}")
    return text


def completion_rate(completed: int, total: int) -> int:
    return round_percent(completed, total)


def _priority_of(task: Task) -> str:
    # 정의되지 않은 우선순위는 기본값(medium) 버킷에 넣어 합계를 보존한다.
    value = (task.priority or "").strip().lower()
    return value if value in PRIORITY_ORDER else DEFAULT_PRIORITY


def summarize(tasks: Sequence[Task], now: Optional[datetime] = None) -> Dict[str, int]:
    now = now or datetime.now()
    total = len(tasks)
    counts = {status: 0 for status in STATUSES}
    overdue = 0
    for task in tasks:
        if task.status in counts:
            counts[task.status] += 1
        if task.is_overdue_at(now):
            overdue += 1
    return {
        "total": total,
        "not_started": counts["not_started"],
        "in_progress": counts["in_progress"],
        "completed": counts["completed"],
        "overdue": overdue,
        "completion_rate": completion_rate(counts["completed"], total),
    }


def by_status(tasks: Sequence[Task]) -> List[Dict]:
    return [
        {"status": status, "total": sum(1 for t in tasks if t.status == status)}
        for status in STATUSES
    ]


def by_priority(tasks: Sequence[Task]) -> List[Dict]:
    rows = {key: {"priority": key, "total": 0, "completed": 0} for key in PRIORITY_ORDER}
    for task in tasks:
        row = rows[_priority_of(task)]
        row["total"] += 1
        if task.status == "completed":
            row["completed"] += 1
    # 빈 버킷도 생략하지 않고 고정 순서로 돌려준다.
    return [rows[key] for key in PRIORITY_ORDER]


def by_project(
    tasks: Sequence[Task],
    projects: Iterable[Project],
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[Dict]:
    now = now or datetime.now()
    grouped: Dict[int, List[Task]] = {}
    for task in tasks:
        grouped.setdefault(task.project_id, []).append(task)

    selected = list(projects)
    if limit is not None:
        selected = selected[:limit]

    rows = []
    for project in selected:
        summary = summarize(grouped.get(project.project_id, []), now)
        rows.append({
            "project_id": project.project_id,
            "project_name": project.name,
            "total": summary["total"],
            "completed": summary["completed"],
            "in_progress": summary["in_progress"],
            "overdue": summary["overdue"],
            "completion_rate": summary["completion_rate"],
        })
    return rows


def by_member(tasks: Sequence[Task], member_ids: Iterable[int], now: Optional[datetime] = None) -> List[Dict]:
    now = now or datetime.now()
    rows = []
    for user_id in member_ids:
        member_tasks = [t for t in tasks if user_id in t.assignee_ids]
        rows.append({"user_id": user_id, **summarize(member_tasks, now)})
    return rows


def aggregate(
    tasks: Sequence[Task],
    dimension: str,
    *,
    projects: Optional[Iterable[Project]] = None,
    member_ids: Optional[Iterable[int]] = None,
    project_limit: Optional[int] = None,
    now: Optional[datetime] = None,
):
    key = validate_dimension(dimension)
    if key == "global":
        return summarize(tasks, now)
    if key == "status":
        return by_status(tasks)
    if key == "priority":
        return by_priority(tasks)
    if key == "project":
        if projects is None:
            raise InvalidAggregationInput("프로젝트별 집계에는 프로젝트 목록이 필요합니다.")
        return by_project(tasks, projects, limit=project_limit, now=now)
    if member_ids is None:
        raise InvalidAggregationInput("멤버별 집계에는 멤버 목록이 필요합니다.")
    return by_member(tasks, member_ids, now=now)
