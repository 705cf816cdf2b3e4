"""Comment Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from sqlalchemy.orm import Session
from datetime import datetime
from app.models.comment import Comment
from app.models.task import Task
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentUpdate
from app.services import mention_service
from app.services import mutation_pipeline as pipeline
from app.services.notification_sink import NotificationSink
from app.utils.errors import NotFoundError, UnauthorizedError
from app.utils.permissions import ensure_visible
from typing import List


def _get_visible_task(db: Session, task_id: int, current_user: User) -> Task:
    task = db.query(Task).filter(Task.task_id == task_id).first()
    return ensure_visible(db, current_user, task, "작업을 찾을 수 없습니다.")


def _get_own_comment(db: Session, comment_id: int, current_user: User) -> Comment:
    comment = db.query(Comment).filter(Comment.comment_id == comment_id).first()
    if not comment:
        raise NotFoundError("댓글을 찾을 수 없습니다.")
    _get_visible_task(db, comment.task_id, current_user)
    if comment.user_id != current_user.user_id:
        raise UnauthorizedError("본인이 작성한 댓글만 수정/삭제할 수 있습니다.")
    return comment


def get_comments(db: Session, task_id: int, current_user: User) -> List[Comment]:
    _get_visible_task(db, task_id, current_user)
    return (
        db.query(Comment)
        .filter(Comment.task_id == task_id)
        .order_by(Comment.created_at, Comment.comment_id)
        .all()
    )


def create_comment(db: Session, data: CommentCreate, current_user: User, sink: NotificationSink) -> Comment:
    task = _get_visible_task(db, data.task_id, current_user)
    mention_ids = mention_service.resolve_mentions(db, data.content, data.mention_ids)

    comment = Comment(task_id=task.task_id, user_id=current_user.user_id, content=data.content)
    if mention_ids:
        comment.mentions = db.query(User).filter(User.user_id.in_(mention_ids)).all()
    db.add(comment)
    db.commit()
    db.refresh(comment)

    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.COMMENT_CREATED,
        action="commented",
        entity_type="task",
        entity_id=task.task_id,
        entity_name=task.title,
        project_id=task.project_id,
        task_id=task.task_id,
        details={"comment_id": comment.comment_id, "mention_ids": mention_ids},
        assignee_ids=task.assignee_ids,
        mention_ids=mention_ids,
    )
    return pipeline.emit(db, comment, event, sink)


def update_comment(
    db: Session,
    comment_id: int,
    data: CommentUpdate,
    current_user: User,
    sink: NotificationSink,
) -> Comment:
    comment = _get_own_comment(db, comment_id, current_user)
    changes = pipeline.field_changes(comment, {"content": data.content})
    comment.content = data.content
    comment.is_edited = True
    comment.edited_at = datetime.now()
    db.commit()
    db.refresh(comment)

    task = comment.task
    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.COMMENT_UPDATED,
        action="updated",
        entity_type="comment",
        entity_id=comment.comment_id,
        entity_name=task.title,
        project_id=task.project_id,
        task_id=task.task_id,
        changes=changes,
    )
    return pipeline.emit(db, comment, event, sink)


def delete_comment(db: Session, comment_id: int, current_user: User, sink: NotificationSink) -> List[str]:
    comment = _get_own_comment(db, comment_id, current_user)
    task = comment.task
    event = pipeline.MutationEvent(
        actor=current_user,
        kind=pipeline.COMMENT_DELETED,
        action="deleted",
        entity_type="comment",
        entity_id=comment.comment_id,
        entity_name=task.title,
        project_id=task.project_id,
        task_id=task.task_id,
    )
    db.delete(comment)
    db.commit()
    return pipeline.run_pipeline(db, event, sink).warnings
