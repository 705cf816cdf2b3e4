"""내보내기/통계 조회 흐름을 조립하는 서비스입니다.

각 함수는 가시 범위 확인 -> 범위 내 조회 -> 집계 -> 보고서 조립 순서로 동작한다.
"""

from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import settings
from app.models.history import History, HISTORY_ENTITY_TYPES
from app.models.project import Project
from app.models.task import Task
from app.models.team import Team
from app.models.user import User
from app.services import aggregation_service, report_service
from app.utils.errors import BadRequestError
from app.utils.permissions import (
    ensure_visible,
    is_superadmin,
    report_task_filter,
    resolve_scope,
    visible_project_filter,
    visible_team_filter,
)


def _day_start(value: Optional[date]) -> Optional[datetime]:
    return datetime.combine(value, time.min) if value else None


def _day_end(value: Optional[date]) -> Optional[datetime]:
    return datetime.combine(value, time.max) if value else None


def _report_tasks(db: Session, current_user: User, project_ids: Optional[List[int]] = None):
    q = db.query(Task)
    clause = report_task_filter(current_user)
    if clause is not None:
        q = q.filter(clause)
    if project_ids is not None:
        q = q.filter(Task.project_id.in_(project_ids))
    return q.order_by(Task.task_id).all()


def _scoped_projects(db: Session, current_user: User) -> List[Project]:
    scope = resolve_scope(db, current_user)
    q = db.query(Project)
    clause = visible_project_filter(scope)
    if clause is not None:
        q = q.filter(clause)
    return q.order_by(Project.project_id).all()


def _scoped_team_count(db: Session, current_user: User) -> int:
    scope = resolve_scope(db, current_user)
    q = db.query(Team)
    clause = visible_team_filter(scope)
    if clause is not None:
        q = q.filter(clause)
    return q.count()


def _user_count(db: Session, current_user: User) -> int:
    # 전체 관리자가 아니면 본인만 센다.
    if is_superadmin(current_user):
        return db.query(User).count()
    return 1


def export_tasks(
    db: Session,
    current_user: User,
    project_id: Optional[int] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    due_from: Optional[date] = None,
    due_to: Optional[date] = None,
    now: Optional[datetime] = None,
):
    q = db.query(Task)
    clause = report_task_filter(current_user)
    if clause is not None:
        q = q.filter(clause)
    if project_id is not None:
        q = q.filter(Task.project_id == project_id)
    if status:
        q = q.filter(Task.status == status)
    if priority:
        q = q.filter(Task.priority == priority)
    if due_from:
        q = q.filter(Task.due_date >= _day_start(due_from))
    if due_to:
        q = q.filter(Task.due_date <= _day_end(due_to))
    tasks = q.order_by(Task.task_id).all()

    now = now or datetime.now()
    return report_service.build_report(
        [("작업", report_service.TASK_COLUMNS, report_service.task_rows(tasks, now))],
        generated_at=now,
    )


def export_projects(db: Session, current_user: User, now: Optional[datetime] = None):
    now = now or datetime.now()
    projects = _scoped_projects(db, current_user)
    tasks = _report_tasks(db, current_user, [p.project_id for p in projects])
    stats = {
        row["project_id"]: row
        for row in aggregation_service.aggregate(tasks, "project", projects=projects, now=now)
    }
    return report_service.build_report(
        [("프로젝트", report_service.PROJECT_COLUMNS, report_service.project_rows(projects, stats))],
        generated_at=now,
    )


def get_statistics(db: Session, current_user: User, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now()
    projects = _scoped_projects(db, current_user)
    tasks = _report_tasks(db, current_user)
    return {
        "user_count": _user_count(db, current_user),
        "team_count": _scoped_team_count(db, current_user),
        "project_count": len(projects),
        "summary": aggregation_service.aggregate(tasks, "global", now=now),
        "by_priority": aggregation_service.aggregate(tasks, "priority", now=now),
        "by_project": aggregation_service.aggregate(
            tasks,
            "project",
            projects=projects,
            project_limit=settings.PROJECT_REPORT_LIMIT,
            now=now,
        ),
    }


def export_statistics(db: Session, current_user: User, now: Optional[datetime] = None):
    now = now or datetime.now()
    stats = get_statistics(db, current_user, now)
    return report_service.build_report(
        [
            (
                "전체 통계",
                report_service.GLOBAL_STATS_COLUMNS,
                report_service.global_stats_rows(
                    stats["user_count"], stats["team_count"], stats["project_count"], stats["summary"]
                ),
            ),
            ("우선순위별", report_service.PRIORITY_COLUMNS, report_service.priority_rows(stats["by_priority"])),
            ("프로젝트별", report_service.PROJECT_STATS_COLUMNS, report_service.project_stats_rows(stats["by_project"])),
        ],
        generated_at=now,
    )


def export_team_report(db: Session, current_user: User, team_id: int, now: Optional[datetime] = None):
    team = db.query(Team).filter(Team.team_id == team_id).first()
    ensure_visible(db, current_user, team, "팀을 찾을 수 없습니다.")

    now = now or datetime.now()
    project_ids = [
        row[0]
        for row in db.query(Project.project_id)
        .filter(or_(Project.team_id == team_id, Project.teams.any(Team.team_id == team_id)))
        .all()
    ]
    tasks = _report_tasks(db, current_user, project_ids)
    members = sorted(team.members, key=lambda m: m.user_id)
    member_stats = aggregation_service.aggregate(
        tasks, "member", member_ids=[m.user_id for m in members], now=now
    )
    return report_service.build_report(
        [("팀 보고서", report_service.MEMBER_COLUMNS, report_service.member_rows(members, member_stats))],
        generated_at=now,
    )


def export_history(
    db: Session,
    current_user: User,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    entity_type: Optional[str] = None,
    now: Optional[datetime] = None,
):
    if entity_type and entity_type not in HISTORY_ENTITY_TYPES:
        raise BadRequestError("지원하지 않는 이력 유형입니다.")

    q = db.query(History)
    if not is_superadmin(current_user):
        q = q.filter(History.user_id == current_user.user_id)
    if date_from:
        q = q.filter(History.created_at >= _day_start(date_from))
    if date_to:
        q = q.filter(History.created_at <= _day_end(date_to))
    if entity_type:
        q = q.filter(History.entity_type == entity_type)
    records = (
        q.order_by(History.created_at.desc(), History.history_id.desc())
        .limit(settings.HISTORY_EXPORT_LIMIT)
        .all()
    )

    return report_service.build_report(
        [("활동 이력", report_service.HISTORY_COLUMNS, report_service.history_rows(records))],
        generated_at=now or datetime.now(),
    )
