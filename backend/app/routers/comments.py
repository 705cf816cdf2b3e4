"""Comments 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.schemas.comment import CommentCreate, CommentUpdate, CommentOut
from app.services import comment_service
from app.services.notification_sink import NotificationSink, get_notification_sink
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get("/task/{task_id}", response_model=List[CommentOut])
def list_comments(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return comment_service.get_comments(db, task_id, current_user)


@router.post("", response_model=CommentOut)
def create_comment(
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return comment_service.create_comment(db, data, current_user, sink)


@router.put("/{comment_id}", response_model=CommentOut)
def update_comment(
    comment_id: int,
    data: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return comment_service.update_comment(db, comment_id, data, current_user, sink)


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    warnings = comment_service.delete_comment(db, comment_id, current_user, sink)
    return {"message": "삭제되었습니다.", "warnings": warnings}
