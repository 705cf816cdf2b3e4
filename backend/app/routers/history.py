"""History 기능 API 라우터입니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.schemas.history import HistoryOut
from app.services import history_service
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("/me", response_model=List[HistoryOut])
def my_history(
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return history_service.get_user_history(db, current_user, limit)


@router.get("/project/{project_id}", response_model=List[HistoryOut])
def project_history(
    project_id: int,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return history_service.get_project_history(db, project_id, current_user, limit)


@router.get("/{entity_type}/{entity_id}", response_model=List[HistoryOut])
def entity_history(
    entity_type: str,
    entity_id: int,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return history_service.get_entity_history(db, entity_type, entity_id, current_user, limit)
