"""UsefulLink 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


useful_link_assignees = Table(
    "useful_link_assignees",
    Base.metadata,
    Column("link_id", Integer, ForeignKey("useful_links.link_id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.user_id"), primary_key=True),
)


class UsefulLink(Base):
    __tablename__ = "useful_links"

    link_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    url = Column(String(500), nullable=False)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    assignees = relationship("User", secondary=useful_link_assignees, order_by="User.user_id")
    creator = relationship("User", foreign_keys=[created_by])

    __table_args__ = (
        Index("idx_useful_link_creator", "created_by"),
    )

    @property
    def assignee_ids(self):
        return [user.user_id for user in self.assignees]

    @property
    def assignee_names(self):
        return [user.full_name for user in self.assignees]

    @property
    def creator_name(self):
        return self.creator.full_name if self.creator else None
