"""User Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.user import UserRoleUpdate, UserUpdate
from app.utils.errors import BadRequestError, NotFoundError, UnauthorizedError
from app.utils.permissions import ADMIN, MEMBER, SUPERADMIN, is_admin_role, is_superadmin, normalize_role


# 일반 관리자가 서로 바꿀 수 있는 역할
ADMIN_ASSIGNABLE_ROLES = {MEMBER, ADMIN}


def _ensure_not_last_superadmin_change(db: Session, user: User, next_role: str):
    if normalize_role(user.role) == SUPERADMIN and next_role != SUPERADMIN:
        count = db.query(User).filter(User.role == SUPERADMIN, User.is_active == True).count()  # noqa: E712
        if count <= 1:
            raise BadRequestError("마지막 전체 관리자 계정의 역할은 변경할 수 없습니다.")


def list_users(db: Session, current_user: User, include_inactive: bool = False):
    if not is_admin_role(current_user):
        raise UnauthorizedError("사용자 목록은 관리자만 조회할 수 있습니다.")
    q = db.query(User)
    if not include_inactive:
        q = q.filter(User.is_active == True)  # noqa: E712
    return q.order_by(User.user_id).all()


def get_user(db: Session, user_id: int, current_user: User) -> User:
    if user_id != current_user.user_id and not is_admin_role(current_user):
        raise UnauthorizedError("다른 사용자 정보는 관리자만 조회할 수 있습니다.")
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("사용자를 찾을 수 없습니다.")
    return user


def change_role(db: Session, user_id: int, data: UserRoleUpdate, current_user: User) -> User:
    user = get_user(db, user_id, current_user)
    next_role = data.role

    if not is_superadmin(current_user):
        if not is_admin_role(current_user):
            raise UnauthorizedError("역할 변경은 관리자만 가능합니다.")
        current_role = normalize_role(user.role)
        if current_role not in ADMIN_ASSIGNABLE_ROLES or next_role not in ADMIN_ASSIGNABLE_ROLES:
            raise UnauthorizedError("전체 관리자 역할은 전체 관리자만 변경할 수 있습니다.")

    _ensure_not_last_superadmin_change(db, user, next_role)
    user.role = next_role
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, data: UserUpdate, current_user: User) -> User:
    if not is_admin_role(current_user):
        raise UnauthorizedError("사용자 정보는 관리자만 수정할 수 있습니다.")
    user = get_user(db, user_id, current_user)
    if normalize_role(user.role) == SUPERADMIN and not is_superadmin(current_user):
        raise UnauthorizedError("전체 관리자 계정은 전체 관리자만 수정할 수 있습니다.")

    updates = data.model_dump(exclude_none=True)
    for key in ("first_name", "last_name"):
        if key in updates:
            updates[key] = updates[key].strip()
            if not updates[key]:
                raise BadRequestError("이름은 비워 둘 수 없습니다.")
    if "email" in updates:
        email = updates["email"].strip().lower()
        if not email or "@" not in email:
            raise BadRequestError("올바른 이메일을 입력하세요.")
        taken = db.query(User).filter(User.email == email, User.user_id != user.user_id).first()
        if taken:
            raise BadRequestError("이미 사용 중인 이메일입니다.")
        updates["email"] = email
    if updates.get("is_active") is False and user.user_id == current_user.user_id:
        raise BadRequestError("본인 계정은 비활성화할 수 없습니다.")

    for key, value in updates.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user
