"""Task 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


TaskStatus = Literal["not_started", "in_progress", "completed"]
TaskPriority = Literal["urgent", "high", "medium", "low"]


class SubtaskCreate(BaseModel):
    title: str


class SubtaskOut(BaseModel):
    subtask_id: int
    title: str
    is_completed: bool
    completed_by: Optional[int] = None
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TaskBase(BaseModel):
    title: str
    description: str = ""
    status: TaskStatus = "not_started"
    priority: TaskPriority = "medium"
    due_date: Optional[datetime] = None
    parent_task_id: Optional[int] = None


class TaskCreate(TaskBase):
    project_id: int
    assignee_ids: List[int] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    parent_task_id: Optional[int] = None
    assignee_ids: Optional[List[int]] = None


class TaskOut(TaskBase):
    task_id: int
    project_id: int
    project_name: Optional[str] = None
    assignee_ids: List[int] = Field(default_factory=list)
    assignee_names: List[str] = Field(default_factory=list)
    created_by: int
    creator_name: Optional[str] = None
    archived: bool = False
    subtasks: List[SubtaskOut] = Field(default_factory=list)
    completion_percentage: int
    is_overdue: bool
    created_at: datetime
    updated_at: Optional[datetime]
    completed_at: Optional[datetime]
    warnings: List[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}
