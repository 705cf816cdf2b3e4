"""Useful links 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.schemas.useful_link import UsefulLinkCreate, UsefulLinkUpdate, UsefulLinkOut
from app.services import useful_link_service
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/useful-links", tags=["useful-links"])


@router.get("", response_model=List[UsefulLinkOut])
def list_links(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return useful_link_service.get_links(db, current_user)


@router.post("", response_model=UsefulLinkOut)
def create_link(data: UsefulLinkCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return useful_link_service.create_link(db, data, current_user)


@router.get("/{link_id}", response_model=UsefulLinkOut)
def get_link(link_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return useful_link_service.get_link(db, link_id, current_user)


@router.put("/{link_id}", response_model=UsefulLinkOut)
def update_link(
    link_id: int,
    data: UsefulLinkUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return useful_link_service.update_link(db, link_id, data, current_user)


@router.delete("/{link_id}")
def delete_link(link_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    useful_link_service.delete_link(db, link_id, current_user)
    return {"message": "삭제되었습니다."}
