"""Project Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from sqlalchemy.orm import Session
from app.models.project import Project
from app.models.team import Team
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services import mutation_pipeline as pipeline
from app.services.notification_sink import NotificationSink
from app.utils.errors import NotFoundError, UnauthorizedError
from app.utils.permissions import (
    WRITE,
    ensure_capability,
    ensure_visible,
    is_admin_role,
    reset_scope_cache,
    resolve_scope,
    visible_project_filter,
)
from typing import Iterable, List, Optional


def _dedupe(ids: Iterable[Optional[int]]) -> List[int]:
    result = []
    for value in ids:
        if value is not None and value not in result:
            result.append(value)
    return result


def _load_teams(db: Session, team_ids: List[int], current_user: User) -> List[Team]:
    if not team_ids:
        return []
    teams = db.query(Team).filter(Team.team_id.in_(team_ids)).order_by(Team.team_id).all()
    if len(teams) != len(team_ids):
        raise NotFoundError("팀을 찾을 수 없습니다.")
    scope = resolve_scope(db, current_user)
    for team in teams:
        if not scope.includes_team(team.team_id):
            raise UnauthorizedError("소속된 팀에만 프로젝트를 연결할 수 있습니다.")
    return teams


def _team_audience(teams: Iterable[Team]) -> List[int]:
    return _dedupe(user_id for team in teams for user_id in team.member_ids)


def get_projects(db: Session, current_user: User, status: Optional[str] = None) -> List[Project]:
    scope = resolve_scope(db, current_user)
    q = db.query(Project)
    clause = visible_project_filter(scope)
    if clause is not None:
        q = q.filter(clause)
    if status:
        q = q.filter(Project.status == status)
    return q.order_by(Project.created_at.desc(), Project.project_id.desc()).all()


def get_project(db: Session, project_id: int, current_user: User) -> Project:
    project = db.query(Project).filter(Project.project_id == project_id).first()
    return ensure_visible(db, current_user, project, "프로젝트를 찾을 수 없습니다.")


def create_project(db: Session, data: ProjectCreate, current_user: User, sink: NotificationSink) -> Project:
    if not is_admin_role(current_user):
        raise UnauthorizedError("프로젝트는 관리자만 생성할 수 있습니다.")

    teams = _load_teams(db, _dedupe([*data.team_ids, data.team_id]), current_user)
    payload = data.model_dump(exclude={"team_ids", "team_id", "tags"})
    project = Project(created_by=current_user.user_id, **payload)
    project.tags = data.tags
    project.teams = teams
    db.add(project)
    db.commit()
    db.refresh(project)
    reset_scope_cache(current_user)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.PROJECT_CREATED,
        action="created",
        entity_type="project",
        entity_id=project.project_id,
        entity_name=project.name,
        project_id=project.project_id,
        details={"team_ids": project.team_ids},
        audience_ids=_team_audience(project.all_teams),
    )
    return pipeline.emit(db, project, event, sink)


def update_project(
    db: Session,
    project_id: int,
    data: ProjectUpdate,
    current_user: User,
    sink: NotificationSink,
) -> Project:
    project = get_project(db, project_id, current_user)
    ensure_capability(db, current_user, project, WRITE, "프로젝트 수정은 관리자만 가능합니다.")

    updates = data.model_dump(exclude_none=True, exclude={"team_ids", "tags"})
    changes = pipeline.field_changes(project, updates)
    if data.tags is not None and data.tags != project.tags:
        changes.append({"field": "tags", "old": project.tags, "new": data.tags})
        project.tags = data.tags

    if data.team_ids is not None:
        previous_team_ids = project.team_ids
        teams = _load_teams(db, _dedupe(data.team_ids), current_user)
        # 새 팀 목록이 주어지면 구 단일 팀 참조는 비우고 연결 테이블만 사용한다.
        project.team_id = None
        project.teams = teams
        next_team_ids = sorted(team.team_id for team in teams)
        if previous_team_ids != next_team_ids:
            changes.append({"field": "team_ids", "old": previous_team_ids, "new": next_team_ids})

    for k, v in updates.items():
        setattr(project, k, v)
    db.commit()
    db.refresh(project)
    reset_scope_cache(current_user)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.PROJECT_UPDATED,
        action="updated",
        entity_type="project",
        entity_id=project.project_id,
        entity_name=project.name,
        project_id=project.project_id,
        changes=changes,
    )
    return pipeline.emit(db, project, event, sink)


def delete_project(db: Session, project_id: int, current_user: User, sink: NotificationSink) -> List[str]:
    project = get_project(db, project_id, current_user)
    ensure_capability(db, current_user, project, WRITE, "프로젝트 삭제는 관리자만 가능합니다.")

    project_name = project.name
    task_count = len(project.tasks)
    db.delete(project)
    db.commit()
    reset_scope_cache(current_user)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.PROJECT_DELETED,
        action="deleted",
        entity_type="project",
        entity_id=project_id,
        entity_name=project_name,
        project_id=project_id,
        details={"deleted_task_count": task_count},
    )
    return pipeline.run_pipeline(db, event, sink).warnings
