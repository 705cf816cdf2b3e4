"""Team Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from sqlalchemy.orm import Session
from typing import List
from app.models.project import Project, project_teams
from app.models.team import Team, TeamMember
from app.models.user import User
from app.schemas.team import TeamCreate, TeamUpdate, TeamMemberCreate
from app.services import mutation_pipeline as pipeline
from app.services.notification_sink import NotificationSink
from app.utils.errors import BadRequestError, NotFoundError, UnauthorizedError
from app.utils.permissions import (
    WRITE,
    ensure_capability,
    ensure_visible,
    is_admin_role,
    reset_scope_cache,
    resolve_scope,
    visible_team_filter,
)


def _active_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.user_id == user_id, User.is_active == True).first()
    if not user:
        raise NotFoundError("사용자를 찾을 수 없습니다.")
    return user


def get_teams(db: Session, current_user: User) -> List[Team]:
    scope = resolve_scope(db, current_user)
    q = db.query(Team)
    clause = visible_team_filter(scope)
    if clause is not None:
        q = q.filter(clause)
    return q.order_by(Team.team_id).all()


def get_team(db: Session, team_id: int, current_user: User) -> Team:
    team = db.query(Team).filter(Team.team_id == team_id).first()
    return ensure_visible(db, current_user, team, "팀을 찾을 수 없습니다.")


def _get_writable_team(db: Session, team_id: int, current_user: User) -> Team:
    team = get_team(db, team_id, current_user)
    ensure_capability(db, current_user, team, WRITE, "팀 관리자만 수정할 수 있습니다.")
    return team


def create_team(db: Session, data: TeamCreate, current_user: User, sink: NotificationSink) -> Team:
    if not is_admin_role(current_user):
        raise UnauthorizedError("팀은 관리자만 생성할 수 있습니다.")

    member_ids = []
    for user_id in data.member_ids:
        if user_id == current_user.user_id or user_id in member_ids:
            continue
        _active_user(db, user_id)
        member_ids.append(user_id)

    team = Team(
        name=data.name,
        description=data.description,
        color=data.color,
        created_by=current_user.user_id,
    )
    team.members.append(TeamMember(user_id=current_user.user_id, role="admin"))
    for user_id in member_ids:
        team.members.append(TeamMember(user_id=user_id, role="member"))
    db.add(team)
    db.commit()
    db.refresh(team)
    reset_scope_cache(current_user)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.TEAM_CREATED,
        action="created",
        entity_type="team",
        entity_id=team.team_id,
        entity_name=team.name,
        team_id=team.team_id,
        details={"member_ids": member_ids},
        audience_ids=member_ids,
    )
    return pipeline.emit(db, team, event, sink)


def update_team(db: Session, team_id: int, data: TeamUpdate, current_user: User, sink: NotificationSink) -> Team:
    team = _get_writable_team(db, team_id, current_user)
    updates = data.model_dump(exclude_none=True)
    changes = pipeline.field_changes(team, updates)
    for k, v in updates.items():
        setattr(team, k, v)
    db.commit()
    db.refresh(team)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.TEAM_UPDATED,
        action="updated",
        entity_type="team",
        entity_id=team.team_id,
        entity_name=team.name,
        team_id=team.team_id,
        changes=changes,
    )
    return pipeline.emit(db, team, event, sink)


def add_member(db: Session, team_id: int, data: TeamMemberCreate, current_user: User, sink: NotificationSink) -> Team:
    team = _get_writable_team(db, team_id, current_user)
    user = _active_user(db, data.user_id)
    if team.member_role(user.user_id) is not None:
        raise BadRequestError("이미 팀에 소속된 사용자입니다.")

    team.members.append(TeamMember(user_id=user.user_id, role=data.role))
    db.commit()
    db.refresh(team)
    reset_scope_cache(current_user)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.TEAM_MEMBER_ADDED,
        action="updated",
        entity_type="team",
        entity_id=team.team_id,
        entity_name=team.name,
        team_id=team.team_id,
        details={"member_added": user.user_id, "role": data.role},
        audience_ids=[user.user_id],
    )
    return pipeline.emit(db, team, event, sink)


def remove_member(db: Session, team_id: int, user_id: int, current_user: User, sink: NotificationSink) -> Team:
    team = _get_writable_team(db, team_id, current_user)
    member = next((m for m in team.members if m.user_id == user_id), None)
    if member is None:
        raise NotFoundError("팀 멤버를 찾을 수 없습니다.")

    team.members.remove(member)
    db.commit()
    db.refresh(team)
    reset_scope_cache(current_user)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.TEAM_MEMBER_REMOVED,
        action="updated",
        entity_type="team",
        entity_id=team.team_id,
        entity_name=team.name,
        team_id=team.team_id,
        details={"member_removed": user_id},
    )
    return pipeline.emit(db, team, event, sink)


def delete_team(db: Session, team_id: int, current_user: User, sink: NotificationSink) -> List[str]:
    team = get_team(db, team_id, current_user)
    if not is_admin_role(current_user):
        raise UnauthorizedError("팀 삭제는 관리자만 가능합니다.")

    team_name = team.name
    # 프로젝트는 남기고 팀 연결만 끊는다.
    db.execute(project_teams.delete().where(project_teams.c.team_id == team_id))
    db.query(Project).filter(Project.team_id == team_id).update({"team_id": None}, synchronize_session=False)
    db.delete(team)
    db.commit()
    reset_scope_cache(current_user)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.TEAM_DELETED,
        action="deleted",
        entity_type="team",
        entity_id=team_id,
        entity_name=team_name,
        team_id=team_id,
    )
    return pipeline.run_pipeline(db, event, sink).warnings
