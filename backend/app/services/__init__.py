"""서비스 레이어 패키지 초기화 모듈입니다."""

from app.services import (
    history_service,
    notification_service,
    notification_sink,
    mutation_pipeline,
    mention_service,
    aggregation_service,
    report_service,
    export_service,
    team_service,
    project_service,
    task_service,
    comment_service,
    user_service,
    useful_link_service,
)
