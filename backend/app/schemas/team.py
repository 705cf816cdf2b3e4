"""Team 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


class TeamBase(BaseModel):
    name: str
    description: str = ""
    color: str = "#3B82F6"


class TeamCreate(TeamBase):
    member_ids: List[int] = Field(default_factory=list)


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None


class TeamMemberCreate(BaseModel):
    user_id: int
    role: Literal["admin", "member"] = "member"


class TeamMemberOut(BaseModel):
    user_id: int
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    role: str
    joined_at: Optional[datetime]

    model_config = {"from_attributes": True}


class TeamOut(TeamBase):
    team_id: int
    created_by: int
    creator_name: Optional[str] = None
    members: List[TeamMemberOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime]
    warnings: List[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}
