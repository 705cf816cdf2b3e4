"""Task Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from sqlalchemy.orm import Session
from datetime import datetime
from app.models.project import Project
from app.models.task import Task, Subtask
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate, SubtaskCreate
from app.services import mutation_pipeline as pipeline
from app.services.notification_sink import NotificationSink
from app.utils.errors import BadRequestError, NotFoundError
from app.utils.permissions import (
    WRITE,
    ensure_capability,
    ensure_visible,
    report_task_filter,
    resolve_scope,
)
from typing import List, Optional


FILTER_TYPES = ("assigned_to_me", "created_by_me_not_assigned")


def _get_visible_project(db: Session, project_id: int, current_user: User) -> Project:
    project = db.query(Project).filter(Project.project_id == project_id).first()
    return ensure_visible(db, current_user, project, "프로젝트를 찾을 수 없습니다.")


def _load_assignees(db: Session, assignee_ids: List[int]) -> List[User]:
    ids = []
    for user_id in assignee_ids:
        if user_id not in ids:
            ids.append(user_id)
    if not ids:
        return []
    users = db.query(User).filter(User.user_id.in_(ids), User.is_active == True).all()
    if len(users) != len(ids):
        raise NotFoundError("담당자를 찾을 수 없습니다.")
    return sorted(users, key=lambda u: u.user_id)


def _validate_parent(db: Session, project_id: int, parent_task_id: Optional[int], task: Optional[Task] = None):
    if parent_task_id is None:
        return
    if task is not None and parent_task_id == task.task_id:
        raise BadRequestError("자기 자신을 상위 작업으로 지정할 수 없습니다.")
    parent = db.query(Task).filter(Task.task_id == parent_task_id).first()
    if not parent or parent.project_id != project_id:
        raise BadRequestError("상위 작업은 같은 프로젝트의 작업이어야 합니다.")
    # 작업 계층은 한 단계까지만 허용한다.
    if parent.parent_task_id is not None:
        raise BadRequestError("하위 작업 아래에 작업을 추가할 수 없습니다.")
    if task is not None:
        has_children = db.query(Task).filter(Task.parent_task_id == task.task_id).first() is not None
        if has_children:
            raise BadRequestError("하위 작업을 가진 작업은 다른 작업 아래로 옮길 수 없습니다.")


def get_tasks(
    db: Session,
    current_user: User,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    project_id: Optional[int] = None,
    archived: bool = False,
    filter_type: Optional[str] = None,
) -> List[Task]:
    if filter_type and filter_type not in FILTER_TYPES:
        raise BadRequestError("지원하지 않는 필터 유형입니다.")

    scope = resolve_scope(db, current_user)
    q = db.query(Task)
    if not scope.unbounded:
        q = q.filter(Task.project_id.in_(sorted(scope.project_ids)))
    # 목록만 본인 담당 또는 본인 생성 작업으로 좁힌다. 단건 조회와 수정은 팀 범위를 따른다.
    clause = report_task_filter(current_user)
    if clause is not None:
        q = q.filter(clause)
    if status:
        q = q.filter(Task.status == status)
    if priority:
        q = q.filter(Task.priority == priority)
    if project_id is not None:
        q = q.filter(Task.project_id == project_id)
    q = q.filter(Task.archived == archived)

    mine = Task.assignees.any(User.user_id == current_user.user_id)
    if filter_type == "assigned_to_me":
        q = q.filter(mine)
    elif filter_type == "created_by_me_not_assigned":
        q = q.filter(Task.created_by == current_user.user_id, ~mine)

    return q.order_by(Task.created_at.desc(), Task.task_id.desc()).all()


def get_overdue_tasks(db: Session, current_user: User, now: Optional[datetime] = None) -> List[Task]:
    now = now or datetime.now()
    q = db.query(Task).filter(
        Task.due_date.isnot(None),
        Task.due_date < now,
        Task.status != "completed",
        Task.archived == False,  # noqa: E712
    )
    clause = report_task_filter(current_user)
    if clause is not None:
        q = q.filter(clause)
    return q.order_by(Task.due_date, Task.task_id).all()


def get_task(db: Session, task_id: int, current_user: User) -> Task:
    task = db.query(Task).filter(Task.task_id == task_id).first()
    return ensure_visible(db, current_user, task, "작업을 찾을 수 없습니다.")


def _get_writable_task(db: Session, task_id: int, current_user: User) -> Task:
    task = get_task(db, task_id, current_user)
    ensure_capability(db, current_user, task, WRITE, "이 작업을 수정할 권한이 없습니다.")
    return task


def _task_event(task: Task, current_user: User, kind: str, action: str, **kwargs) -> pipeline.MutationEvent:
    return pipeline.MutationEvent(
        actor=current_user,
        kind=kind,
        action=action,
        entity_type="task",
        entity_id=task.task_id,
        entity_name=task.title,
        project_id=task.project_id,
        task_id=task.task_id,
        assignee_ids=task.assignee_ids,
        **kwargs,
    )


def create_task(db: Session, data: TaskCreate, current_user: User, sink: NotificationSink) -> Task:
    _get_visible_project(db, data.project_id, current_user)
    _validate_parent(db, data.project_id, data.parent_task_id)
    assignees = _load_assignees(db, data.assignee_ids)

    payload = data.model_dump(exclude={"assignee_ids"})
    if payload.get("status") == "completed":
        payload["completed_at"] = datetime.now()
    task = Task(created_by=current_user.user_id, **payload)
    task.assignees = assignees
    db.add(task)
    db.commit()
    db.refresh(task)

    event = _task_event(
        task, current_user, pipeline.TASK_CREATED, "created",
        details={"status": task.status, "priority": task.priority},
    )
    return pipeline.emit(db, task, event, sink)


def update_task(db: Session, task_id: int, data: TaskUpdate, current_user: User, sink: NotificationSink) -> Task:
    task = _get_writable_task(db, task_id, current_user)

    updates = data.model_dump(exclude_none=True, exclude={"assignee_ids"})
    for key in ("description", "due_date", "parent_task_id"):
        if key in data.model_fields_set:
            updates[key] = getattr(data, key)
    if "parent_task_id" in updates:
        _validate_parent(db, task.project_id, updates["parent_task_id"], task)

    previous_status = task.status
    status_changed = "status" in updates and updates["status"] != previous_status
    if status_changed and updates["status"] == "completed":
        updates["completed_at"] = datetime.now()
    elif status_changed:
        updates["completed_at"] = None

    changes = pipeline.field_changes(task, updates)

    previous_assignee_ids = None
    if data.assignee_ids is not None:
        assignees = _load_assignees(db, data.assignee_ids)
        current_ids = task.assignee_ids
        next_ids = [user.user_id for user in assignees]
        if current_ids != next_ids:
            previous_assignee_ids = current_ids
            changes.append({"field": "assignee_ids", "old": current_ids, "new": next_ids})
            task.assignees = assignees

    for k, v in updates.items():
        setattr(task, k, v)
    db.commit()
    db.refresh(task)

    if status_changed and task.status == "completed":
        action = "completed"
    elif previous_assignee_ids is not None and all(c["field"] == "assignee_ids" for c in changes):
        action = "assigned"
    else:
        action = "updated"

    event = _task_event(
        task, current_user, pipeline.TASK_UPDATED, action,
        details={"status": task.status} if status_changed else {},
        changes=changes,
        previous_assignee_ids=previous_assignee_ids,
        status_changed=status_changed,
    )
    return pipeline.emit(db, task, event, sink)


def delete_task(db: Session, task_id: int, current_user: User, sink: NotificationSink) -> List[str]:
    task = _get_writable_task(db, task_id, current_user)
    event = _task_event(task, current_user, pipeline.TASK_DELETED, "deleted", details={"status": task.status})

    db.query(Task).filter(Task.parent_task_id == task_id).update(
        {"parent_task_id": None}, synchronize_session=False
    )
    db.delete(task)
    db.commit()
    return pipeline.run_pipeline(db, event, sink).warnings


def _set_archived(db: Session, task_id: int, archived: bool, current_user: User, sink: NotificationSink) -> Task:
    task = _get_writable_task(db, task_id, current_user)
    changes = pipeline.field_changes(task, {"archived": archived})
    task.archived = archived
    db.commit()
    db.refresh(task)

    event = _task_event(
        task, current_user, pipeline.TASK_UPDATED, "updated",
        details={"archived": archived},
        changes=changes,
    )
    return pipeline.emit(db, task, event, sink)


def archive_task(db: Session, task_id: int, current_user: User, sink: NotificationSink) -> Task:
    return _set_archived(db, task_id, True, current_user, sink)


def unarchive_task(db: Session, task_id: int, current_user: User, sink: NotificationSink) -> Task:
    return _set_archived(db, task_id, False, current_user, sink)


def add_subtask(db: Session, task_id: int, data: SubtaskCreate, current_user: User, sink: NotificationSink) -> Task:
    task = _get_writable_task(db, task_id, current_user)
    title = (data.title or "").strip()
    if not title:
        raise BadRequestError("하위 작업 제목을 입력해 주세요.")

    task.subtasks.append(Subtask(title=title))
    db.commit()
    db.refresh(task)

    event = _task_event(task, current_user, pipeline.TASK_UPDATED, "updated", details={"subtask_added": title})
    return pipeline.emit(db, task, event, sink)


def toggle_subtask(db: Session, task_id: int, subtask_id: int, current_user: User, sink: NotificationSink) -> Task:
    task = _get_writable_task(db, task_id, current_user)
    subtask = next((st for st in task.subtasks if st.subtask_id == subtask_id), None)
    if subtask is None:
        raise NotFoundError("하위 작업을 찾을 수 없습니다.")

    subtask.is_completed = not subtask.is_completed
    if subtask.is_completed:
        subtask.completed_by = current_user.user_id
        subtask.completed_at = datetime.now()
    else:
        subtask.completed_by = None
        subtask.completed_at = None
    db.commit()
    db.refresh(task)

    event = _task_event(
        task, current_user, pipeline.TASK_UPDATED, "updated",
        details={"subtask_id": subtask_id, "is_completed": subtask.is_completed},
    )
    return pipeline.emit(db, task, event, sink)
