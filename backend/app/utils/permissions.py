"""역할/팀 소속 기반 가시 범위(scope)와 권한 판정을 한곳에서 담당합니다."""

from dataclasses import dataclass
from typing import FrozenSet, Optional, Set, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.project import Project
from app.models.task import Task
from app.models.team import Team, TeamMember
from app.models.useful_link import UsefulLink
from app.models.user import User
from app.utils.errors import NotFoundError, UnauthorizedError


MEMBER = "member"
ADMIN = "admin"
SUPERADMIN = "superadmin"

ALL_ROLES = (MEMBER, ADMIN, SUPERADMIN)
ADMIN_ROLES = (ADMIN, SUPERADMIN)

READ = "read"
WRITE = "write"
REPORT_EXPORT = "report_export"

Target = Union[Team, Project, Task, UsefulLink]


def normalize_role(role: Optional[str]) -> str:
    # 알 수 없는 역할은 가장 제한적인 member로 취급한다.
    text = str(role or "").strip().lower()
    return text if text in ALL_ROLES else MEMBER


def is_superadmin(user: User) -> bool:
    return normalize_role(user.role) == SUPERADMIN


def is_admin_role(user: User) -> bool:
    return normalize_role(user.role) in ADMIN_ROLES


@dataclass(frozen=True)
class AccessScope:
    team_ids: FrozenSet[int] = frozenset()
    project_ids: FrozenSet[int] = frozenset()
    unbounded: bool = False

    def includes_team(self, team_id: Optional[int]) -> bool:
        return self.unbounded or team_id in self.team_ids

    def includes_project(self, project_id: Optional[int]) -> bool:
        return self.unbounded or project_id in self.project_ids

    @property
    def is_empty(self) -> bool:
        return not self.unbounded and not self.team_ids and not self.project_ids


def _member_team_ids(db: Session, user_id: int) -> Set[int]:
    member_rows = db.query(TeamMember.team_id).filter(TeamMember.user_id == user_id).all()
    created_rows = db.query(Team.team_id).filter(Team.created_by == user_id).all()
    return {int(row[0]) for row in member_rows} | {int(row[0]) for row in created_rows}


def _scoped_project_ids(db: Session, user_id: int, team_ids: Set[int]) -> Set[int]:
    conditions = [Project.created_by == user_id]
    if team_ids:
        conditions.append(Project.team_id.in_(sorted(team_ids)))
        conditions.append(Project.teams.any(Team.team_id.in_(sorted(team_ids))))
    rows = db.query(Project.project_id).filter(or_(*conditions)).all()
    return {int(row[0]) for row in rows}


def resolve_scope(db: Session, user: User) -> AccessScope:
    cached = getattr(user, "_access_scope_cache", None)
    if cached is not None:
        return cached

    if is_superadmin(user):
        scope = AccessScope(unbounded=True)
    else:
        team_ids = _member_team_ids(db, user.user_id)
        project_ids = _scoped_project_ids(db, user.user_id, team_ids)
        scope = AccessScope(team_ids=frozenset(team_ids), project_ids=frozenset(project_ids))

    setattr(user, "_access_scope_cache", scope)
    return scope


def reset_scope_cache(user: User):
    # 팀/프로젝트 소속이 바뀐 요청에서는 다음 판정 전에 캐시를 비운다.
    if hasattr(user, "_access_scope_cache"):
        delattr(user, "_access_scope_cache")


def visible_team_filter(scope: AccessScope):
    if scope.unbounded:
        return None
    return Team.team_id.in_(sorted(scope.team_ids))


def visible_project_filter(scope: AccessScope):
    if scope.unbounded:
        return None
    return Project.project_id.in_(sorted(scope.project_ids))


def report_task_filter(user: User):
    # 보고서/내보내기 조회는 팀원이라도 본인 담당 또는 본인 생성 작업만 본다.
    if is_superadmin(user):
        return None
    return or_(
        Task.assignees.any(User.user_id == user.user_id),
        Task.created_by == user.user_id,
    )


def visible_link_filter(user: User):
    # 링크는 팀 범위와 무관하게 배정받았거나 직접 만든 것만 보인다.
    if is_superadmin(user):
        return None
    return or_(
        UsefulLink.assignees.any(User.user_id == user.user_id),
        UsefulLink.created_by == user.user_id,
    )


def can_act(db: Session, user: User, target: Target) -> bool:
    if is_superadmin(user):
        return True
    if isinstance(target, UsefulLink):
        return user.user_id in target.assignee_ids or target.created_by == user.user_id
    scope = resolve_scope(db, user)
    if isinstance(target, Team):
        return scope.includes_team(target.team_id)
    if isinstance(target, Project):
        return scope.includes_project(target.project_id)
    if isinstance(target, Task):
        return scope.includes_project(target.project_id)
    return False


def capabilities(db: Session, user: User, target: Target) -> FrozenSet[str]:
    if is_superadmin(user):
        return frozenset({READ, WRITE, REPORT_EXPORT})
    if not can_act(db, user, target):
        return frozenset()

    caps = {READ}
    if isinstance(target, Team):
        caps.add(REPORT_EXPORT)
        if is_admin_role(user) or target.is_team_admin(user.user_id):
            caps.add(WRITE)
    elif isinstance(target, Project):
        caps.add(REPORT_EXPORT)
        if is_admin_role(user):
            caps.add(WRITE)
    elif isinstance(target, Task):
        # 작업 CRUD는 팀 소속만으로 읽기/쓰기가 모두 허용된다.
        caps.add(WRITE)
        if user.user_id in target.assignee_ids or target.created_by == user.user_id:
            caps.add(REPORT_EXPORT)
    elif isinstance(target, UsefulLink):
        if is_admin_role(user):
            caps.add(WRITE)
    return frozenset(caps)


def has_capability(db: Session, user: User, target: Target, capability: str) -> bool:
    return capability in capabilities(db, user, target)


def ensure_visible(db: Session, user: User, target: Optional[Target], detail: str) -> Target:
    if target is None or not has_capability(db, user, target, READ):
        raise NotFoundError(detail)
    return target


def ensure_capability(db: Session, user: User, target: Target, capability: str, detail: str):
    if not has_capability(db, user, target, capability):
        raise UnauthorizedError(detail)
