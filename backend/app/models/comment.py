"""Comment 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, Text, DateTime, Boolean, ForeignKey, Index, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.mixins import SideEffectWarningsMixin


comment_mentions = Table(
    "comment_mentions",
    Base.metadata,
    Column("comment_id", Integer, ForeignKey("comments.comment_id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.user_id"), primary_key=True),
)


class Comment(SideEffectWarningsMixin, Base):
    __tablename__ = "comments"

    comment_id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.task_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    content = Column(Text, nullable=False)
    is_edited = Column(Boolean, default=False)
    edited_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())

    task = relationship("Task", back_populates="comments")
    author = relationship("User", foreign_keys=[user_id])
    mentions = relationship("User", secondary=comment_mentions, order_by="User.user_id")

    __table_args__ = (
        Index("idx_comment_task", "task_id", "created_at"),
        Index("idx_comment_user", "user_id"),
    )

    @property
    def author_name(self):
        return self.author.full_name if self.author else None

    @property
    def mention_ids(self):
        return [user.user_id for user in self.mentions]
