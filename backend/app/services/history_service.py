"""History(감사 이력) 기록/조회 도메인 서비스입니다."""

import json
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.comment import Comment
from app.models.history import History, HISTORY_ENTITY_TYPES
from app.models.project import Project
from app.models.task import Task
from app.models.team import Team
from app.models.user import User
from app.utils.errors import BadRequestError, NotFoundError
from app.utils.permissions import ensure_visible, is_superadmin


def create_history(
    db: Session,
    *,
    user_id: int,
    action: str,
    entity_type: str,
    entity_id: int,
    entity_name: str,
    project_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
    changes: Optional[Any] = None,
) -> History:
    row = History(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_name=entity_name,
        project_id=project_id,
        details_json=json.dumps(details or {}, ensure_ascii=False, default=str),
        changes_json=json.dumps(changes, ensure_ascii=False, default=str) if changes is not None else None,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _ordered(query, limit: int) -> List[History]:
    return query.order_by(History.created_at.desc(), History.history_id.desc()).limit(limit).all()


def get_project_history(db: Session, project_id: int, current_user: User, limit: Optional[int] = None) -> List[History]:
    project = db.query(Project).filter(Project.project_id == project_id).first()
    ensure_visible(db, current_user, project, "프로젝트를 찾을 수 없습니다.")
    q = db.query(History).filter(History.project_id == project_id)
    return _ordered(q, limit or settings.PROJECT_HISTORY_LIMIT)


def get_user_history(db: Session, current_user: User, limit: Optional[int] = None) -> List[History]:
    q = db.query(History).filter(History.user_id == current_user.user_id)
    return _ordered(q, limit or settings.USER_HISTORY_LIMIT)


def _entity_target(db: Session, entity_type: str, entity_id: int):
    if entity_type == "task":
        return db.query(Task).filter(Task.task_id == entity_id).first()
    if entity_type == "project":
        return db.query(Project).filter(Project.project_id == entity_id).first()
    if entity_type == "team":
        return db.query(Team).filter(Team.team_id == entity_id).first()
    comment = db.query(Comment).filter(Comment.comment_id == entity_id).first()
    return comment.task if comment else None


def get_entity_history(
    db: Session,
    entity_type: str,
    entity_id: int,
    current_user: User,
    limit: Optional[int] = None,
) -> List[History]:
    if entity_type not in HISTORY_ENTITY_TYPES:
        raise BadRequestError("지원하지 않는 이력 유형입니다.")

    # 삭제된 엔티티의 이력은 전체 관리자만 조회할 수 있다.
    if not is_superadmin(current_user):
        target = _entity_target(db, entity_type, entity_id)
        if target is None:
            raise NotFoundError("이력을 찾을 수 없습니다.")
        ensure_visible(db, current_user, target, "이력을 찾을 수 없습니다.")

    q = db.query(History).filter(
        History.entity_type == entity_type,
        History.entity_id == entity_id,
    )
    return _ordered(q, limit or settings.USER_HISTORY_LIMIT)
