"""Notification 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class NotificationOut(BaseModel):
    noti_id: int
    recipient_id: int
    sender_id: Optional[int]
    sender_name: Optional[str] = None
    noti_type: str
    title: str
    message: str
    related_task_id: Optional[int]
    related_project_id: Optional[int]
    related_team_id: Optional[int]
    is_read: bool
    read_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListOut(BaseModel):
    unread_count: int
    items: List[NotificationOut] = Field(default_factory=list)
