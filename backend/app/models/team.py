"""Team 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.mixins import SideEffectWarningsMixin


class Team(SideEffectWarningsMixin, Base):
    __tablename__ = "teams"

    team_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, default="")
    color = Column(String(20), default="#3B82F6")
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    members = relationship("TeamMember", back_populates="team", cascade="all, delete-orphan")
    creator = relationship("User", foreign_keys=[created_by])

    @property
    def member_ids(self):
        return [m.user_id for m in self.members]

    @property
    def creator_name(self):
        return self.creator.full_name if self.creator else None

    def member_role(self, user_id: int):
        for member in self.members:
            if member.user_id == user_id:
                return member.role or "member"
        return None

    def is_team_admin(self, user_id: int) -> bool:
        # 생성자는 members에 없어도 팀 관리자로 간주한다.
        if self.created_by == user_id:
            return True
        return self.member_role(user_id) == "admin"


class TeamMember(Base):
    __tablename__ = "team_members"

    member_id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.team_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    role = Column(String(20), default="member")  # admin/member
    joined_at = Column(DateTime, server_default=func.now())

    team = relationship("Team", back_populates="members")
    user = relationship("User", back_populates="team_memberships")

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_member"),
        Index("idx_team_member_user", "user_id"),
    )

    @property
    def user_name(self):
        return self.user.full_name if self.user else None

    @property
    def user_email(self):
        return self.user.email if self.user else None
