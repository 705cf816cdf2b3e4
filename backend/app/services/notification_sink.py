"""저장된 알림을 실시간 전달 계층으로 내보내는 싱크(sink) 정의입니다."""

import logging
from typing import Any, Dict, Protocol

from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def publish(self, event: Dict[str, Any]) -> None:
        ...


class LoggingNotificationSink:
    """실시간 전송 계층이 붙기 전까지 이벤트를 로그로만 남기는 기본 싱크."""

    def publish(self, event: Dict[str, Any]) -> None:
        logger.info(
            "[sink] notification type=%s recipient=%s sender=%s",
            event.get("type"),
            event.get("recipient"),
            event.get("sender"),
        )


_default_sink = LoggingNotificationSink()


def get_notification_sink() -> NotificationSink:
    return _default_sink


def to_event(noti: Notification) -> Dict[str, Any]:
    return {
        "type": noti.noti_type,
        "title": noti.title,
        "message": noti.message,
        "recipient": noti.recipient_id,
        "sender": noti.sender_id,
        "related_task": noti.related_task_id,
        "related_project": noti.related_project_id,
        "related_team": noti.related_team_id,
        "created_at": noti.created_at.isoformat() if noti.created_at else None,
    }
