"""Exports 기능 API 라우터입니다. 보고서 봉투(JSON)를 돌려주며 파일 인코딩은 클라이언트 몫입니다."""

from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.schemas.report import ReportOut, StatisticsOut
from app.services import export_service
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/exports", tags=["exports"])


@router.get("/tasks", response_model=ReportOut)
def export_tasks(
    project_id: Optional[int] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    due_from: Optional[date] = None,
    due_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return export_service.export_tasks(db, current_user, project_id, status, priority, due_from, due_to)


@router.get("/projects", response_model=ReportOut)
def export_projects(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return export_service.export_projects(db, current_user)


@router.get("/statistics", response_model=ReportOut)
def export_statistics(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return export_service.export_statistics(db, current_user)


@router.get("/statistics/summary", response_model=StatisticsOut)
def get_statistics(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return export_service.get_statistics(db, current_user)


@router.get("/teams/{team_id}", response_model=ReportOut)
def export_team_report(team_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return export_service.export_team_report(db, current_user, team_id)


@router.get("/history", response_model=ReportOut)
def export_history(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    entity_type: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return export_service.export_history(db, current_user, date_from, date_to, entity_type)
