"""User 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime


class UserBase(BaseModel):
    email: str
    first_name: str
    last_name: str
    role: str


class UserOut(UserBase):
    user_id: int
    full_name: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserRoleUpdate(BaseModel):
    role: Literal["member", "admin", "superadmin"]


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None
