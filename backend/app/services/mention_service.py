"""멘션(@) 파싱 및 대상 사용자 매칭을 담당하는 도메인 서비스입니다."""

import html
import re
from typing import Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from app.models.user import User


MENTION_PATTERN = re.compile(r"(?<![\w@])@([A-Za-z0-9가-힣._-]{2,30})")


def _strip_html(raw: Optional[str]) -> str:
    if not raw:
        return ""
    no_tag = re.sub(r"<[^>]+>", " ", raw)
    return html.unescape(no_tag)


def extract_mentions(texts: Iterable[Optional[str]]) -> Set[str]:
    tokens: Set[str] = set()
    for text in texts:
        plain = _strip_html(text)
        for token in MENTION_PATTERN.findall(plain):
            tokens.add(token.strip())
    return {token for token in tokens if token}


def _normalized_key(value: Optional[str]) -> str:
    if not value:
        return ""
    return re.sub(r"\s+", "", str(value)).strip().lower()


def _mention_keys_for_user(user: User) -> Set[str]:
    keys: Set[str] = set()

    def add(raw: Optional[str]):
        normalized = _normalized_key(raw)
        if normalized:
            keys.add(normalized)

    email = (user.email or "").strip()
    if "@" in email:
        add(email.split("@", 1)[0])  # e.g. "kim.minsu@corp.com" -> "kim.minsu"
    add(user.first_name)
    add(user.last_name)
    add(user.full_name)
    return keys


def resolve_mentions(
    db: Session,
    text: Optional[str],
    explicit_ids: Iterable[int] = (),
) -> List[int]:
    """명시적으로 지정된 사용자와 본문 @토큰으로 찾은 사용자를 합쳐 돌려준다."""
    result: List[int] = []
    seen = set()

    explicit = [int(uid) for uid in explicit_ids]
    if explicit:
        rows = db.query(User.user_id).filter(User.user_id.in_(explicit), User.is_active == True).all()
        known = {int(row[0]) for row in rows}
        for user_id in explicit:
            if user_id in known and user_id not in seen:
                seen.add(user_id)
                result.append(user_id)

    token_keys = {_normalized_key(token) for token in extract_mentions([text])}
    token_keys.discard("")
    if not token_keys:
        return result

    users = db.query(User).filter(User.is_active == True).order_by(User.user_id).all()
    for user in users:
        if user.user_id in seen:
            continue
        if token_keys & _mention_keys_for_user(user):
            seen.add(user.user_id)
            result.append(user.user_id)
    return result
