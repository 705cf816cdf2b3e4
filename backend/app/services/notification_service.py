"""Notification Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from datetime import datetime
from sqlalchemy.orm import Session
from app.config import settings
from app.models.notification import Notification
from app.utils.errors import NotFoundError
from typing import Optional


def create_notification(
    db: Session,
    *,
    recipient_id: int,
    noti_type: str,
    title: str,
    message: str,
    sender_id: Optional[int] = None,
    related_task_id: Optional[int] = None,
    related_project_id: Optional[int] = None,
    related_team_id: Optional[int] = None,
) -> Notification:
    noti = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        noti_type=noti_type,
        title=title,
        message=message,
        related_task_id=related_task_id,
        related_project_id=related_project_id,
        related_team_id=related_team_id,
    )
    db.add(noti)
    db.commit()
    db.refresh(noti)
    return noti


def get_notifications(db: Session, user_id: int, unread_only: bool = False, limit: Optional[int] = None) -> dict:
    q = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        q = q.filter(Notification.is_read == False)  # noqa: E712
    items = (
        q.order_by(Notification.created_at.desc(), Notification.noti_id.desc())
        .limit(limit or settings.NOTIFICATION_LIST_LIMIT)
        .all()
    )
    unread_count = (
        db.query(Notification)
        .filter(Notification.recipient_id == user_id, Notification.is_read == False)  # noqa: E712
        .count()
    )
    return {"unread_count": unread_count, "items": items}


def _get_own(db: Session, noti_id: int, user_id: int) -> Notification:
    # 다른 사용자의 알림도 존재 여부를 드러내지 않도록 404로 응답한다.
    noti = db.query(Notification).filter(
        Notification.noti_id == noti_id,
        Notification.recipient_id == user_id,
    ).first()
    if not noti:
        raise NotFoundError("알림을 찾을 수 없습니다.")
    return noti


def mark_read(db: Session, noti_id: int, user_id: int) -> Notification:
    noti = _get_own(db, noti_id, user_id)
    if not noti.is_read:
        noti.is_read = True
        noti.read_at = datetime.now()
        db.commit()
        db.refresh(noti)
    return noti


def mark_all_read(db: Session, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read == False,  # noqa: E712
    ).update({"is_read": True, "read_at": datetime.now()}, synchronize_session=False)
    db.commit()
    return updated


def delete_notification(db: Session, noti_id: int, user_id: int):
    noti = _get_own(db, noti_id, user_id)
    db.delete(noti)
    db.commit()
