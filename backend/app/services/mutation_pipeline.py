"""커밋된 변경(생성/수정/삭제)을 이력 1건과 알림 N건으로 이어 주는 후처리 파이프라인입니다.

단계: COMMITTED -> HISTORY_WRITTEN -> NOTIFICATIONS_COMPUTED -> NOTIFICATIONS_EMITTED -> DONE

엔티티 변경은 이미 커밋된 상태로 들어온다. 이후 단계의 실패는 되돌리지 않고
로그와 경고(warnings)로만 남기며, 호출한 API 응답은 성공으로 유지된다.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.history import History
from app.models.notification import Notification
from app.models.user import User
from app.services import history_service, notification_service
from app.services.notification_sink import NotificationSink, to_event
from app.utils.errors import SideEffectPartialFailure

logger = logging.getLogger(__name__)


TASK_CREATED = "task_created"
TASK_UPDATED = "task_updated"
TASK_DELETED = "task_deleted"
COMMENT_CREATED = "comment_created"
COMMENT_UPDATED = "comment_updated"
COMMENT_DELETED = "comment_deleted"
TEAM_CREATED = "team_created"
TEAM_UPDATED = "team_updated"
TEAM_DELETED = "team_deleted"
TEAM_MEMBER_ADDED = "team_member_added"
TEAM_MEMBER_REMOVED = "team_member_removed"
PROJECT_CREATED = "project_created"
PROJECT_UPDATED = "project_updated"
PROJECT_DELETED = "project_deleted"


class PipelineStage(str, Enum):
    COMMITTED = "committed"
    HISTORY_WRITTEN = "history_written"
    NOTIFICATIONS_COMPUTED = "notifications_computed"
    NOTIFICATIONS_EMITTED = "notifications_emitted"
    DONE = "done"


@dataclass
class MutationEvent:
    actor: User
    kind: str
    action: str
    entity_type: str
    entity_id: int
    entity_name: str
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    team_id: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)
    changes: Optional[Any] = None
    assignee_ids: List[int] = field(default_factory=list)
    previous_assignee_ids: Optional[List[int]] = None
    status_changed: bool = False
    mention_ids: List[int] = field(default_factory=list)
    audience_ids: List[int] = field(default_factory=list)


@dataclass
class NotificationDraft:
    recipient_id: int
    noti_type: str
    title: str
    message: str
    related_task_id: Optional[int] = None
    related_project_id: Optional[int] = None
    related_team_id: Optional[int] = None


@dataclass
class PipelineResult:
    stages: List[PipelineStage] = field(default_factory=lambda: [PipelineStage.COMMITTED])
    history: Optional[History] = None
    notifications: List[Notification] = field(default_factory=list)
    failures: List[SideEffectPartialFailure] = field(default_factory=list)

    @property
    def stage(self) -> PipelineStage:
        return self.stages[-1]

    def advance(self, stage: PipelineStage):
        self.stages.append(stage)

    @property
    def warnings(self) -> List[str]:
        return [str(failure) for failure in self.failures]


def _recipients(user_ids: Iterable[int], actor_id: int) -> List[int]:
    # 순서를 유지한 채 중복과 행위자 본인을 제거한다.
    seen = set()
    result = []
    for user_id in user_ids:
        if user_id is None or user_id == actor_id or user_id in seen:
            continue
        seen.add(user_id)
        result.append(user_id)
    return result


def _draft(event: MutationEvent, recipient_id: int, noti_type: str, title: str, message: str) -> NotificationDraft:
    return NotificationDraft(
        recipient_id=recipient_id,
        noti_type=noti_type,
        title=title,
        message=message,
        related_task_id=event.task_id,
        related_project_id=event.project_id,
        related_team_id=event.team_id,
    )


def compute_notifications(event: MutationEvent) -> List[NotificationDraft]:
    actor_id = event.actor.user_id
    actor_name = event.actor.full_name
    name = event.entity_name
    drafts: List[NotificationDraft] = []

    if event.kind == TASK_CREATED:
        for user_id in _recipients(event.assignee_ids, actor_id):
            drafts.append(_draft(
                event, user_id, "task_assigned", "새 작업 배정",
                f'{actor_name}님이 작업 "{name}"을(를) 배정했습니다.',
            ))

    elif event.kind == TASK_UPDATED:
        if event.previous_assignee_ids is not None:
            previous = set(event.previous_assignee_ids)
            newly_assigned = [uid for uid in event.assignee_ids if uid not in previous]
            for user_id in _recipients(newly_assigned, actor_id):
                drafts.append(_draft(
                    event, user_id, "task_assigned", "새 작업 배정",
                    f'{actor_name}님이 작업 "{name}"을(를) 배정했습니다.',
                ))
        # 새 담당자는 배정 알림과 상태 변경 알림을 모두 받는다.
        if event.status_changed:
            status = event.details.get("status", "")
            for user_id in _recipients(event.assignee_ids, actor_id):
                drafts.append(_draft(
                    event, user_id, "task_updated", "작업 상태 변경",
                    f'{actor_name}님이 작업 "{name}"의 상태를 "{status}"(으)로 변경했습니다.',
                ))

    elif event.kind == COMMENT_CREATED:
        # 담당자이면서 멘션된 사용자는 유형이 다른 알림 2건을 받는다.
        for user_id in _recipients(event.assignee_ids, actor_id):
            drafts.append(_draft(
                event, user_id, "comment_added", "새 댓글",
                f'{actor_name}님이 작업 "{name}"에 댓글을 남겼습니다.',
            ))
        for user_id in _recipients(event.mention_ids, actor_id):
            drafts.append(_draft(
                event, user_id, "mention", "멘션 알림",
                f'{actor_name}님이 작업 "{name}"의 댓글에서 회원님을 멘션했습니다.',
            ))

    elif event.kind in (TEAM_CREATED, TEAM_MEMBER_ADDED):
        for user_id in _recipients(event.audience_ids, actor_id):
            drafts.append(_draft(
                event, user_id, "team_added", "팀 추가",
                f'{actor_name}님이 회원님을 팀 "{name}"에 추가했습니다.',
            ))

    elif event.kind == PROJECT_CREATED:
        for user_id in _recipients(event.audience_ids, actor_id):
            drafts.append(_draft(
                event, user_id, "project_added", "새 프로젝트",
                f'{actor_name}님이 팀 프로젝트 "{name}"을(를) 생성했습니다.',
            ))

    return drafts


STAGE_FAILURE_MESSAGES = {
    "history": "변경 이력을 저장하지 못했습니다.",
    "notification": "알림을 저장하지 못했습니다.",
    "push": "알림을 전송하지 못했습니다.",
}


def _record_failure(result: PipelineResult, event: MutationEvent, stage: str, exc: Exception):
    # 응답에는 단계별 요약만 싣고, 원본 예외는 로그에만 남긴다.
    failure = SideEffectPartialFailure(stage, STAGE_FAILURE_MESSAGES[stage])
    result.failures.append(failure)
    logger.warning(
        "[pipeline] %s failed for %s#%s (%s): %s",
        stage, event.entity_type, event.entity_id, event.kind, exc,
    )


def run_pipeline(db: Session, event: MutationEvent, sink: NotificationSink) -> PipelineResult:
    result = PipelineResult()

    try:
        result.history = history_service.create_history(
            db,
            user_id=event.actor.user_id,
            action=event.action,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            entity_name=event.entity_name,
            project_id=event.project_id,
            details=event.details,
            changes=event.changes,
        )
        result.advance(PipelineStage.HISTORY_WRITTEN)
    except SQLAlchemyError as exc:
        db.rollback()
        _record_failure(result, event, "history", exc)

    drafts = compute_notifications(event)
    result.advance(PipelineStage.NOTIFICATIONS_COMPUTED)

    for draft in drafts:
        try:
            noti = notification_service.create_notification(
                db,
                recipient_id=draft.recipient_id,
                sender_id=event.actor.user_id,
                noti_type=draft.noti_type,
                title=draft.title,
                message=draft.message,
                related_task_id=draft.related_task_id,
                related_project_id=draft.related_project_id,
                related_team_id=draft.related_team_id,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            _record_failure(result, event, "notification", exc)
            continue
        result.notifications.append(noti)

        # 전달 실패는 저장을 되돌리지 않는다. 수신자는 다음 조회에서 확인한다.
        try:
            sink.publish(to_event(noti))
        except Exception as exc:
            _record_failure(result, event, "push", exc)

    if len(result.notifications) == len(drafts):
        result.advance(PipelineStage.NOTIFICATIONS_EMITTED)
    result.advance(PipelineStage.DONE)
    return result


def attach_warnings(entity, result: PipelineResult):
    setattr(entity, "_side_effect_warnings", result.warnings)
    return entity


def emit(db: Session, entity, event: MutationEvent, sink: NotificationSink):
    result = run_pipeline(db, event, sink)
    return attach_warnings(entity, result)


def field_changes(entity, updates: Dict[str, Any]) -> List[Dict[str, Any]]:
    """setattr 하기 전에 호출해 실제로 바뀌는 필드만 (field, old, new)로 돌려준다."""
    changes = []
    for key, new_value in updates.items():
        old_value = getattr(entity, key, None)
        if old_value != new_value:
            changes.append({"field": key, "old": old_value, "new": new_value})
    return changes
