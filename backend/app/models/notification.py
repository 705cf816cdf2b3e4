"""Notification 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


NOTIFICATION_TYPES = (
    "task_assigned",
    "task_updated",
    "task_overdue",
    "comment_added",
    "mention",
    "team_added",
    "project_added",
)


class Notification(Base):
    __tablename__ = "notification"

    noti_id = Column(Integer, primary_key=True, autoincrement=True)
    recipient_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    noti_type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    # 관련 엔티티는 삭제 후에도 알림이 남도록 FK 없이 보관한다.
    related_task_id = Column(Integer, nullable=True)
    related_project_id = Column(Integer, nullable=True)
    related_team_id = Column(Integer, nullable=True)
    is_read = Column(Boolean, default=False)
    read_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())

    recipient = relationship("User", foreign_keys=[recipient_id], back_populates="notifications")
    sender = relationship("User", foreign_keys=[sender_id])

    __table_args__ = (
        Index("idx_notification_recipient", "recipient_id", "is_read", "created_at"),
    )

    @property
    def sender_name(self):
        return self.sender.full_name if self.sender else None
