"""UsefulLink Service 도메인 서비스 레이어입니다. 배정된 사용자에게만 보이는 바로가기 링크를 관리합니다."""

from sqlalchemy.orm import Session
from typing import List, Optional
from app.models.useful_link import UsefulLink
from app.models.user import User
from app.schemas.useful_link import UsefulLinkCreate, UsefulLinkUpdate
from app.utils.errors import BadRequestError, NotFoundError, UnauthorizedError
from app.utils.permissions import WRITE, ensure_capability, ensure_visible, is_admin_role, visible_link_filter


def _clean(value: Optional[str], label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise BadRequestError(f"{label}은(는) 비워 둘 수 없습니다.")
    return text


def _clean_url(value: Optional[str]) -> str:
    url = _clean(value, "URL")
    if not url.lower().startswith(("http://", "https://")):
        raise BadRequestError("URL은 http:// 또는 https:// 로 시작해야 합니다.")
    return url


def _load_assignees(db: Session, assignee_ids: List[int]) -> List[User]:
    ids = list(dict.fromkeys(assignee_ids))
    if not ids:
        return []
    users = db.query(User).filter(User.user_id.in_(ids), User.is_active == True).all()  # noqa: E712
    if len(users) != len(ids):
        raise NotFoundError("배정할 사용자를 찾을 수 없습니다.")
    return sorted(users, key=lambda u: u.user_id)


def get_links(db: Session, current_user: User) -> List[UsefulLink]:
    q = db.query(UsefulLink)
    clause = visible_link_filter(current_user)
    if clause is not None:
        q = q.filter(clause)
    return q.order_by(UsefulLink.created_at.desc(), UsefulLink.link_id.desc()).all()


def get_link(db: Session, link_id: int, current_user: User) -> UsefulLink:
    link = db.query(UsefulLink).filter(UsefulLink.link_id == link_id).first()
    return ensure_visible(db, current_user, link, "링크를 찾을 수 없습니다.")


def _get_writable_link(db: Session, link_id: int, current_user: User) -> UsefulLink:
    link = get_link(db, link_id, current_user)
    ensure_capability(db, current_user, link, WRITE, "링크는 관리자만 수정/삭제할 수 있습니다.")
    return link


def create_link(db: Session, data: UsefulLinkCreate, current_user: User) -> UsefulLink:
    if not is_admin_role(current_user):
        raise UnauthorizedError("링크는 관리자만 등록할 수 있습니다.")
    link = UsefulLink(
        title=_clean(data.title, "제목"),
        url=_clean_url(data.url),
        created_by=current_user.user_id,
    )
    link.assignees = _load_assignees(db, data.assignee_ids)
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


def update_link(db: Session, link_id: int, data: UsefulLinkUpdate, current_user: User) -> UsefulLink:
    link = _get_writable_link(db, link_id, current_user)
    if data.title is not None:
        link.title = _clean(data.title, "제목")
    if data.url is not None:
        link.url = _clean_url(data.url)
    if data.assignee_ids is not None:
        link.assignees = _load_assignees(db, data.assignee_ids)
    db.commit()
    db.refresh(link)
    return link


def delete_link(db: Session, link_id: int, current_user: User):
    link = _get_writable_link(db, link_id, current_user)
    db.delete(link)
    db.commit()
