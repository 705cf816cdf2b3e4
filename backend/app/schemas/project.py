"""Project 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import date, datetime


Priority = Literal["urgent", "high", "medium", "low"]


class ProjectBase(BaseModel):
    name: str
    description: str = ""
    status: Literal["active", "archived"] = "active"
    priority: Priority = "medium"
    color: str = "#10B981"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tags: List[str] = Field(default_factory=list)


class ProjectCreate(ProjectBase):
    team_ids: List[int] = Field(default_factory=list)
    # 구 클라이언트 호환용 단일 팀 참조
    team_id: Optional[int] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[Literal["active", "archived"]] = None
    priority: Optional[Priority] = None
    color: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tags: Optional[List[str]] = None
    team_ids: Optional[List[int]] = None


class ProjectOut(ProjectBase):
    project_id: int
    team_id: Optional[int] = None
    team_ids: List[int] = Field(default_factory=list)
    team_names: List[str] = Field(default_factory=list)
    created_by: int
    creator_name: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime]
    warnings: List[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}
