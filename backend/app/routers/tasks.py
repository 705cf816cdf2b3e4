from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.schemas.task import TaskCreate, TaskUpdate, TaskOut, SubtaskCreate
from app.services import task_service
from app.services.notification_sink import NotificationSink, get_notification_sink
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskOut])
def list_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    project_id: Optional[int] = None,
    archived: bool = False,
    filter_type: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return task_service.get_tasks(db, current_user, status, priority, project_id, archived, filter_type)


@router.get("/overdue", response_model=List[TaskOut])
def list_overdue_tasks(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return task_service.get_overdue_tasks(db, current_user)


@router.post("", response_model=TaskOut)
def create_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return task_service.create_task(db, data, current_user, sink)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return task_service.get_task(db, task_id, current_user)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return task_service.update_task(db, task_id, data, current_user, sink)


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    warnings = task_service.delete_task(db, task_id, current_user, sink)
    return {"message": "삭제되었습니다.", "warnings": warnings}


@router.patch("/{task_id}/archive", response_model=TaskOut)
def archive_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return task_service.archive_task(db, task_id, current_user, sink)


@router.patch("/{task_id}/unarchive", response_model=TaskOut)
def unarchive_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return task_service.unarchive_task(db, task_id, current_user, sink)


@router.post("/{task_id}/subtasks", response_model=TaskOut)
def add_subtask(
    task_id: int,
    data: SubtaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return task_service.add_subtask(db, task_id, data, current_user, sink)


@router.patch("/{task_id}/subtasks/{subtask_id}", response_model=TaskOut)
def toggle_subtask(
    task_id: int,
    subtask_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return task_service.toggle_subtask(db, task_id, subtask_id, current_user, sink)
