"""History(감사 이력) 도메인의 SQLAlchemy 모델 정의입니다."""

import json

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


HISTORY_ACTIONS = ("created", "updated", "deleted", "assigned", "completed", "commented", "attached_file")
HISTORY_ENTITY_TYPES = ("task", "project", "team", "comment")


class History(Base):
    __tablename__ = "history"

    history_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    action = Column(String(20), nullable=False)
    entity_type = Column(String(20), nullable=False)
    entity_id = Column(Integer, nullable=False)
    # 기록 시점의 이름 스냅샷. 이후 원본이 바뀌어도 다시 계산하지 않는다.
    entity_name = Column(String(200), nullable=False)
    # project FK는 걸지 않는다. 프로젝트 삭제 이후에도 이력은 남아야 한다.
    project_id = Column(Integer, nullable=True)
    details_json = Column("details", Text, default="{}")
    changes_json = Column("changes", Text)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", foreign_keys=[user_id])
    project = relationship(
        "Project",
        primaryjoin="foreign(History.project_id) == Project.project_id",
        viewonly=True,
    )

    __table_args__ = (
        Index("idx_history_project", "project_id", "created_at"),
        Index("idx_history_user", "user_id", "created_at"),
        Index("idx_history_entity", "entity_type", "entity_id"),
    )

    @property
    def details(self):
        try:
            parsed = json.loads(self.details_json or "{}")
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}

    @property
    def changes(self):
        if not self.changes_json:
            return None
        try:
            return json.loads(self.changes_json)
        except json.JSONDecodeError:
            return None

    @property
    def user_name(self):
        return self.user.full_name if self.user else None

    @property
    def project_name(self):
        return self.project.name if self.project else None
