"""집계 결과와 엔티티 목록을 이름 붙은 표(시트) 목록으로 정리하는 보고서 빌더입니다.

스프레드시트 인코딩/서식은 외부 직렬화기의 몫이며 여기서는 행 데이터만 만든다.
생성 시각은 보고서 봉투의 generated_at 한 곳에만 둔다.
"""

import json
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from app.models.history import History
from app.models.project import Project
from app.models.task import Task
from app.models.team import TeamMember


PRIORITY_LABELS = {"urgent": "긴급", "high": "높음", "medium": "보통", "low": "낮음"}

TASK_COLUMNS = (
    "ID", "제목", "설명", "프로젝트", "상태", "우선순위", "담당자", "마감일",
    "하위 작업", "완료된 하위 작업", "진행률(%)", "지연 여부", "생성자", "생성일", "최종 수정일",
)
PROJECT_COLUMNS = (
    "ID", "이름", "설명", "팀", "상태", "우선순위", "전체 작업", "완료 작업", "진행 중 작업",
    "지연 작업", "완료율(%)", "시작일", "종료일", "태그", "생성자", "생성일",
)
GLOBAL_STATS_COLUMNS = (
    "전체 사용자", "전체 팀", "전체 프로젝트", "전체 작업", "미시작 작업",
    "진행 중 작업", "완료 작업", "지연 작업", "전체 완료율(%)",
)
PRIORITY_COLUMNS = ("우선순위", "작업 수", "완료")
PROJECT_STATS_COLUMNS = ("프로젝트", "전체 작업", "완료", "진행 중", "지연", "완료율(%)")
MEMBER_COLUMNS = ("멤버", "이메일", "전체 작업", "완료", "진행 중", "미시작", "지연", "완료율(%)", "가입일")
HISTORY_COLUMNS = ("일시", "사용자", "이메일", "작업", "유형", "대상", "프로젝트", "상세")

Sheet = Tuple[str, Sequence[str], List[Dict[str, Any]]]


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "예" if value else "아니오"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def build_sheet(name: str, columns: Sequence[str], rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    ordered = [{col: _cell(row.get(col)) for col in columns} for row in rows]
    return {"name": name, "columns": list(columns), "rows": ordered}


def build_report(sheets: Sequence[Sheet], generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "generated_at": generated_at or datetime.now(),
        "sheets": [build_sheet(name, columns, rows) for name, columns, rows in sheets],
    }


def task_rows(tasks: Sequence[Task], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or datetime.now()
    rows = []
    for task in tasks:
        rows.append({
            "ID": task.task_id,
            "제목": task.title,
            "설명": task.description or "",
            "프로젝트": task.project_name or "",
            "상태": task.status,
            "우선순위": task.priority,
            "담당자": ", ".join(task.assignee_names),
            "마감일": task.due_date.date() if task.due_date else None,
            "하위 작업": len(task.subtasks),
            "완료된 하위 작업": task.completed_subtask_count,
            "진행률(%)": task.completion_percentage,
            "지연 여부": task.is_overdue_at(now),
            "생성자": task.creator_name or "",
            "생성일": task.created_at.date() if task.created_at else None,
            "최종 수정일": task.updated_at.date() if task.updated_at else None,
        })
    return rows


def project_rows(projects: Sequence[Project], stats: Mapping[int, Mapping[str, int]]) -> List[Dict[str, Any]]:
    rows = []
    for project in projects:
        summary = stats.get(project.project_id, {})
        rows.append({
            "ID": project.project_id,
            "이름": project.name,
            "설명": project.description or "",
            "팀": ", ".join(project.team_names),
            "상태": project.status,
            "우선순위": project.priority,
            "전체 작업": summary.get("total", 0),
            "완료 작업": summary.get("completed", 0),
            "진행 중 작업": summary.get("in_progress", 0),
            "지연 작업": summary.get("overdue", 0),
            "완료율(%)": summary.get("completion_rate", 0),
            "시작일": project.start_date,
            "종료일": project.end_date,
            "태그": ", ".join(project.tags),
            "생성자": project.creator_name or "",
            "생성일": project.created_at.date() if project.created_at else None,
        })
    return rows


def global_stats_rows(user_count: int, team_count: int, project_count: int, summary: Mapping[str, int]):
    return [{
        "전체 사용자": user_count,
        "전체 팀": team_count,
        "전체 프로젝트": project_count,
        "전체 작업": summary["total"],
        "미시작 작업": summary["not_started"],
        "진행 중 작업": summary["in_progress"],
        "완료 작업": summary["completed"],
        "지연 작업": summary["overdue"],
        "전체 완료율(%)": summary["completion_rate"],
    }]


def priority_rows(aggregate_rows: Sequence[Mapping[str, Any]]):
    return [
        {
            "우선순위": PRIORITY_LABELS.get(row["priority"], row["priority"]),
            "작업 수": row["total"],
            "완료": row["completed"],
        }
        for row in aggregate_rows
    ]


def project_stats_rows(aggregate_rows: Sequence[Mapping[str, Any]]):
    return [
        {
            "프로젝트": row["project_name"],
            "전체 작업": row["total"],
            "완료": row["completed"],
            "진행 중": row["in_progress"],
            "지연": row["overdue"],
            "완료율(%)": row["completion_rate"],
        }
        for row in aggregate_rows
    ]


def member_rows(members: Sequence[TeamMember], aggregate_rows: Sequence[Mapping[str, Any]]):
    by_user = {row["user_id"]: row for row in aggregate_rows}
    rows = []
    for member in members:
        summary = by_user.get(member.user_id)
        if summary is None:
            continue
        rows.append({
            "멤버": member.user_name or "",
            "이메일": member.user_email or "",
            "전체 작업": summary["total"],
            "완료": summary["completed"],
            "진행 중": summary["in_progress"],
            "미시작": summary["not_started"],
            "지연": summary["overdue"],
            "완료율(%)": summary["completion_rate"],
            "가입일": member.joined_at.date() if member.joined_at else None,
        })
    return rows


def history_rows(records: Sequence[History]):
    rows = []
    for record in records:
        rows.append({
            "일시": record.created_at,
            "사용자": record.user_name or "알 수 없음",
            "이메일": record.user.email if record.user else "",
            "작업": record.action,
            "유형": record.entity_type,
            "대상": record.entity_name,
            "프로젝트": record.project_name or "",
            "상세": json.dumps(record.details, ensure_ascii=False, sort_keys=True),
        })
    return rows
