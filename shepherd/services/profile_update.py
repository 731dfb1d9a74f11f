"""
services/profile_update.py

회원 셀프 프로필 수정 링크 서비스.

흐름:
1) 범위 안의 회원에 대해 1회성 토큰 발급 (유효기간 7일)
2) {APP_URL}/update/{token} 링크를 SMS / WhatsApp 으로 전달
3) 회원이 링크로 접속 → 토큰 검증 → 허용된 필드만 수정
4) 수정 완료 시 토큰 즉시 무효화

설계 원칙:
- 토큰 검증 실패(없음/만료)는 모두 같은 메시지 ("Invalid or expired link")
- 이름/연락처/보호자 정보 등 허용 필드 외에는 수정 불가

"""

import secrets
import uuid
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from shepherd.core.config import settings
from shepherd.core.timeutil import utcnow, as_utc
from shepherd.models.member import Member
from shepherd.services.scope import ActingUser, NotFound, get_member_in_scope

EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "birthday",
    "residence",
    "region",
    "guardian",
    "guardian_contact",
    "guardian_location",
    "profile_picture",
)

INVALID_LINK = "Invalid or expired link"


def update_url(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/update/{token}"


def generate_update_token(
    db: Session,
    acting_user: ActingUser,
    member_id: uuid.UUID,
    now: datetime | None = None,
) -> tuple[Member, str, str]:
    member = get_member_in_scope(db, acting_user, member_id)

    token = secrets.token_urlsafe(32)
    member.update_token = token
    member.token_expires_at = (now or utcnow()) + timedelta(days=settings.UPDATE_TOKEN_EXPIRE_DAYS)
    db.flush()
    return member, token, update_url(token)


def validate_update_token(db: Session, token: str, now: datetime | None = None) -> Member:
    now = now or utcnow()
    member = db.scalar(select(Member).where(Member.update_token == token))
    if member is None or member.token_expires_at is None or as_utc(member.token_expires_at) <= now:
        raise NotFound(INVALID_LINK)
    return member


def apply_profile_update(db: Session, token: str, updates: dict, now: datetime | None = None) -> Member:
    member = validate_update_token(db, token, now=now)

    unknown = set(updates) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")

    if updates.get("email"):
        clash = db.scalar(
            select(Member.id).where(Member.email == updates["email"], Member.id != member.id)
        )
        if clash is not None:
            raise ValueError("Email already in use")

    for key, value in updates.items():
        if value is None and key in ("first_name", "last_name"):
            continue
        setattr(member, key, value)

    member.update_token = None
    member.token_expires_at = None
    db.flush()
    return member


def update_link_message(member_name: str, url: str, channel: str) -> str:
    if channel == "sms":
        return (
            f"Hi {member_name}!\nAgape Ministries invites you to update your profile.\n"
            f"Tap here: {url}\nLink expires in {settings.UPDATE_TOKEN_EXPIRE_DAYS} days."
        )
    return (
        f"Hi {member_name}!\n\n"
        "Agape Incorporated Ministries invites you to update your profile information.\n\n"
        f"Tap to update: {url}\n\n"
        f"This link expires in {settings.UPDATE_TOKEN_EXPIRE_DAYS} days."
    )
