"""
profile.py

회원 셀프 프로필 수정 링크 API.

주요 기능:
- (로그인) 범위 안 회원에게 수정 링크 발급 후 SMS 발송 또는 WhatsApp 링크 반환
- (공개) 토큰으로 현재 프로필 조회
- (공개) 토큰으로 허용된 필드만 수정, 수정 후 토큰 무효화

설계 원칙:
- 공개 API 는 인증 없이 토큰만으로 동작
- 토큰이 없거나 만료되었으면 모두 404 "Invalid or expired link"
- 링크 발송 실패는 토큰 발급을 취소하지 않음 (링크는 응답으로도 반환)

관련 파일:
- shepherd.services.profile_update   : 토큰 발급 / 검증 / 수정
- shepherd.services.messaging        : SMS 발송 / WhatsApp 링크

"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_acting_user, get_message_gateway
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.schemas.member import UpdateLinkRequest
from shepherd.schemas.profile import ProfileUpdateRequest
from shepherd.services.messaging import MessageGateway, whatsapp_link
from shepherd.services.profile_update import (
    EDITABLE_FIELDS,
    generate_update_token,
    validate_update_token,
    apply_profile_update,
    update_link_message,
)
from shepherd.services.scope import ActingUser

router = APIRouter(tags=["profile"])


def _profile_data(member) -> dict:
    data = {}
    for key in EDITABLE_FIELDS:
        value = getattr(member, key)
        data[key] = value.isoformat() if hasattr(value, "isoformat") else value
    return data


"""
프로필 수정 링크 발급 API

- channel=sms      : Arkesel 로 링크 문자 발송
- channel=whatsapp : wa.me 클릭 투 채팅 링크 반환 (발송은 사용자가 직접)

"""
@router.post("/members/{member_id}/update-link")
def member_update_link(
    member_id: uuid.UUID,
    data: UpdateLinkRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
    gateway: MessageGateway = Depends(get_message_gateway),
):
    try:
        member, token, url = generate_update_token(db, acting_user, member_id)
        if not member.phone:
            raise ValueError("Member has no phone number")
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    message = update_link_message(member.first_name, url, data.channel)
    result = {"url": url, "channel": data.channel, "sent": False}

    if data.channel == "whatsapp":
        result["whatsapp_url"] = whatsapp_link(member.phone, message)
    else:
        sent = gateway.send_sms([member.phone], message)
        result["sent"] = sent.success
        if not sent.success:
            result["error"] = sent.message

    return {"message": "Update link generated", "data": result}


@router.get("/update/{token}")
def profile_get(token: str, db: Session = Depends(get_db)):
    try:
        member = validate_update_token(db, token)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return {"data": _profile_data(member)}


@router.post("/update/{token}")
def profile_update(token: str, data: ProfileUpdateRequest, db: Session = Depends(get_db)):
    updates = data.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        member = apply_profile_update(db, token, updates)
        db.commit()
        db.refresh(member)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Profile updated", "data": _profile_data(member)}
