"""Comment 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class CommentCreate(BaseModel):
    task_id: int
    content: str = Field(min_length=1, max_length=2000)
    mention_ids: List[int] = Field(default_factory=list)


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class CommentOut(BaseModel):
    comment_id: int
    task_id: int
    user_id: int
    author_name: Optional[str] = None
    content: str
    mention_ids: List[int] = Field(default_factory=list)
    is_edited: bool
    edited_at: Optional[datetime]
    created_at: datetime
    warnings: List[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}
