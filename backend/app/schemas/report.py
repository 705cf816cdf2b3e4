"""보고서/통계 응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List
from datetime import datetime


class ReportSheetOut(BaseModel):
    name: str
    columns: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class ReportOut(BaseModel):
    generated_at: datetime
    sheets: List[ReportSheetOut] = Field(default_factory=list)


class TaskSummaryOut(BaseModel):
    total: int
    not_started: int
    in_progress: int
    completed: int
    overdue: int
    completion_rate: int


class PriorityRowOut(BaseModel):
    priority: str
    total: int
    completed: int


class ProjectRowOut(BaseModel):
    project_id: int
    project_name: str
    total: int
    completed: int
    in_progress: int
    overdue: int
    completion_rate: int


class StatisticsOut(BaseModel):
    user_count: int
    team_count: int
    project_count: int
    summary: TaskSummaryOut
    by_priority: List[PriorityRowOut] = Field(default_factory=list)
    by_project: List[ProjectRowOut] = Field(default_factory=list)
