"""Teams 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.schemas.team import TeamCreate, TeamUpdate, TeamMemberCreate, TeamOut
from app.services import team_service
from app.services.notification_sink import NotificationSink, get_notification_sink
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/teams", tags=["teams"])


@router.get("", response_model=List[TeamOut])
def list_teams(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return team_service.get_teams(db, current_user)


@router.post("", response_model=TeamOut)
def create_team(
    data: TeamCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return team_service.create_team(db, data, current_user, sink)


@router.get("/{team_id}", response_model=TeamOut)
def get_team(team_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return team_service.get_team(db, team_id, current_user)


@router.put("/{team_id}", response_model=TeamOut)
def update_team(
    team_id: int,
    data: TeamUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return team_service.update_team(db, team_id, data, current_user, sink)


@router.delete("/{team_id}")
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    warnings = team_service.delete_team(db, team_id, current_user, sink)
    return {"message": "삭제되었습니다.", "warnings": warnings}


@router.post("/{team_id}/members", response_model=TeamOut)
def add_member(
    team_id: int,
    data: TeamMemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return team_service.add_member(db, team_id, data, current_user, sink)


@router.delete("/{team_id}/members/{user_id}", response_model=TeamOut)
def remove_member(
    team_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
):
    return team_service.remove_member(db, team_id, user_id, current_user, sink)
