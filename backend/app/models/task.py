"""Task 도메인의 SQLAlchemy 모델 정의입니다."""

from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.mixins import SideEffectWarningsMixin


task_assignees = Table(
    "task_assignees",
    Base.metadata,
    Column("task_id", Integer, ForeignKey("tasks.task_id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.user_id"), primary_key=True),
)


def round_percent(part: int, whole: int) -> int:
    # 0.5 올림 반올림. 분모가 0이면 0을 돌려준다.
    if not whole:
        return 0
    return (200 * part + whole) // (2 * whole)


class Task(SideEffectWarningsMixin, Base):
    __tablename__ = "tasks"

    task_id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.project_id"), nullable=False)
    parent_task_id = Column(Integer, ForeignKey("tasks.task_id"), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, default="")
    status = Column(String(20), default="not_started")  # not_started/in_progress/completed
    priority = Column(String(10), default="medium")  # urgent/high/medium/low
    due_date = Column(DateTime)
    archived = Column(Boolean, default=False)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
    completed_at = Column(DateTime)

    project = relationship("Project", back_populates="tasks")
    assignees = relationship("User", secondary=task_assignees, order_by="User.user_id")
    creator = relationship("User", foreign_keys=[created_by])
    parent_task = relationship("Task", remote_side=[task_id])
    subtasks = relationship(
        "Subtask",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Subtask.subtask_id",
    )
    comments = relationship("Comment", back_populates="task", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_task_project", "project_id"),
        Index("idx_task_due_date", "due_date"),
        Index("idx_task_creator", "created_by"),
    )

    @property
    def assignee_ids(self):
        return [user.user_id for user in self.assignees]

    @property
    def assignee_names(self):
        return [user.full_name for user in self.assignees]

    @property
    def project_name(self):
        return self.project.name if self.project else None

    @property
    def creator_name(self):
        return self.creator.full_name if self.creator else None

    @property
    def completed_subtask_count(self):
        return sum(1 for st in self.subtasks if st.is_completed)

    def is_overdue_at(self, now: datetime) -> bool:
        if self.due_date is None:
            return False
        return self.due_date < now and self.status != "completed"

    @property
    def is_overdue(self):
        return self.is_overdue_at(datetime.now())

    @property
    def completion_percentage(self):
        total = len(self.subtasks)
        if total == 0:
            return 100 if self.status == "completed" else 0
        return round_percent(self.completed_subtask_count, total)


class Subtask(Base):
    __tablename__ = "subtasks"

    subtask_id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.task_id"), nullable=False)
    title = Column(String(200), nullable=False)
    is_completed = Column(Boolean, default=False)
    completed_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    completed_at = Column(DateTime)

    task = relationship("Task", back_populates="subtasks")
