"""UsefulLink 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class UsefulLinkCreate(BaseModel):
    title: str
    url: str
    assignee_ids: List[int] = Field(default_factory=list)


class UsefulLinkUpdate(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    assignee_ids: Optional[List[int]] = None


class UsefulLinkOut(BaseModel):
    link_id: int
    title: str
    url: str
    assignee_ids: List[int] = []
    assignee_names: List[str] = []
    created_by: int
    creator_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
