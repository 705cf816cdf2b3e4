"""Project 도메인의 SQLAlchemy 모델 정의입니다."""

import json

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Index, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.mixins import SideEffectWarningsMixin


project_teams = Table(
    "project_teams",
    Base.metadata,
    Column("project_id", Integer, ForeignKey("projects.project_id"), primary_key=True),
    Column("team_id", Integer, ForeignKey("teams.team_id"), primary_key=True),
)


class Project(SideEffectWarningsMixin, Base):
    __tablename__ = "projects"

    project_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, default="")
    # 단일 팀 참조(구 스키마). teams와 항상 합집합으로 취급한다.
    team_id = Column(Integer, ForeignKey("teams.team_id"), nullable=True)
    status = Column(String(20), default="active")  # active/archived
    priority = Column(String(10), default="medium")  # urgent/high/medium/low
    color = Column(String(20), default="#10B981")
    start_date = Column(Date)
    end_date = Column(Date)
    tags_json = Column("tags", Text, default="[]")
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    legacy_team = relationship("Team", foreign_keys=[team_id])
    teams = relationship("Team", secondary=project_teams, order_by="Team.team_id")
    creator = relationship("User", foreign_keys=[created_by])
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_project_legacy_team", "team_id"),
        Index("idx_project_creator", "created_by"),
    )

    @property
    def team_ids(self):
        ids = {team.team_id for team in self.teams}
        if self.team_id is not None:
            ids.add(self.team_id)
        return sorted(ids)

    @property
    def all_teams(self):
        rows = {team.team_id: team for team in self.teams}
        if self.legacy_team is not None:
            rows.setdefault(self.legacy_team.team_id, self.legacy_team)
        return [rows[key] for key in sorted(rows)]

    @property
    def team_names(self):
        return [team.name for team in self.all_teams]

    @property
    def creator_name(self):
        return self.creator.full_name if self.creator else None

    @property
    def tags(self):
        if not self.tags_json:
            return []
        try:
            parsed = json.loads(self.tags_json)
            if isinstance(parsed, list):
                return [str(item) for item in parsed if str(item).strip()]
        except json.JSONDecodeError:
            return []
        return []

    @tags.setter
    def tags(self, values):
        cleaned = [str(item).strip() for item in (values or []) if str(item).strip()]
        self.tags_json = json.dumps(cleaned, ensure_ascii=False)
