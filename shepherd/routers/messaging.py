"""
messaging.py

회원 연락 / 메시지 발송 API 모음.

주요 기능:
- 개별 회원 SMS / Email 발송
- 회원 연락 링크 (WhatsApp click-to-chat, tel:)
- 공지 / 행사 알림 / 오늘 생일 축하 일괄 발송 (채널별 성공·실패 집계)

설계 원칙:
- 발송 대상은 현재 사용자 범위 안의 회원만
- 게이트웨이 실패는 HTTP 에러가 아닌 결과 값(success=false)으로 전달
- 수신 연락처가 없는 개별 발송은 400

관련 파일:
- shepherd.services.messaging   : 게이트웨이 / 템플릿 / 일괄 발송
- shepherd.schemas.messaging    : 요청 스키마

"""

import uuid
from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_acting_user, get_message_gateway
from shepherd.core.errors import SERVICE_ERRORS, http_error
from shepherd.schemas.messaging import (
    MemberMessageRequest,
    AnnouncementRequest,
    ChannelsRequest,
    EventNotificationRequest,
)
from shepherd.services.messaging import (
    MessageGateway,
    BulkSendResult,
    call_link,
    follow_up_text,
    whatsapp_link,
    send_member_notification,
    send_announcement,
    send_event_notification,
    send_birthday_wishes,
)
from shepherd.services.scope import ActingUser, get_member_in_scope

router = APIRouter(tags=["messaging"])


def _bulk_response(results: dict[str, BulkSendResult]) -> dict:
    sent = sum(r.sent for r in results.values())
    failed = sum(r.failed for r in results.values())
    return {
        "message": f"Sent {sent} message(s), {failed} failed",
        "data": {channel: asdict(result) for channel, result in results.items()},
    }


@router.post("/members/{member_id}/messages")
def member_message(
    member_id: uuid.UUID,
    data: MemberMessageRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
    gateway: MessageGateway = Depends(get_message_gateway),
):
    try:
        result = send_member_notification(
            db, acting_user, gateway, member_id, data.channel, data.message, subject=data.subject
        )
    except SERVICE_ERRORS as e:
        raise http_error(e)

    return {"message": result.message, "data": asdict(result)}


@router.get("/members/{member_id}/contact-links")
def member_contact_links(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        member = get_member_in_scope(db, acting_user, member_id)
    except SERVICE_ERRORS as e:
        raise http_error(e)

    if not member.phone:
        return {"data": {"whatsapp": None, "call": None}}
    return {
        "data": {
            "whatsapp": whatsapp_link(member.phone, follow_up_text(member.first_name)),
            "call": call_link(member.phone),
        }
    }


@router.post("/messages/announcement")
def announcement(
    data: AnnouncementRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
    gateway: MessageGateway = Depends(get_message_gateway),
):
    try:
        results = send_announcement(db, acting_user, gateway, data.message, data.channels, subject=data.subject)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return _bulk_response(results)


@router.post("/messages/event")
def event_notification(
    data: EventNotificationRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
    gateway: MessageGateway = Depends(get_message_gateway),
):
    try:
        results = send_event_notification(db, acting_user, gateway, data.event_id, data.channels)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return _bulk_response(results)


# 오늘 생일인 범위 안 Active 회원에게 축하 메시지
@router.post("/messages/birthdays")
def birthday_wishes(
    data: ChannelsRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
    gateway: MessageGateway = Depends(get_message_gateway),
):
    try:
        results = send_birthday_wishes(db, acting_user, gateway, data.channels)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return _bulk_response(results)
