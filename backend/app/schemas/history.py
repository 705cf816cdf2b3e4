"""History 응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime


class HistoryOut(BaseModel):
    history_id: int
    user_id: int
    user_name: Optional[str] = None
    action: str
    entity_type: str
    entity_id: int
    entity_name: str
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    changes: Optional[Any] = None
    created_at: datetime

    model_config = {"from_attributes": True}
