"""
services/messaging.py

회원 연락(SMS / Email / WhatsApp / 전화) 관련 서비스.

주요 기능:
- 전화번호 국제 형식 변환 (0 으로 시작하면 가나 국가 코드 233 부여)
- WhatsApp click-to-chat 링크, tel: 링크 생성
- SMS / 알림 메시지 템플릿
- Arkesel(SMS) / Resend(Email) HTTP 게이트웨이 호출
- 개별 회원 알림, 공지 / 행사 알림 / 생일 축하 일괄 발송

설계 원칙:
- 게이트웨이 호출은 예외를 밖으로 던지지 않고 GatewayResult 로 반환
- 키가 설정되지 않은 게이트웨이는 "not configured" 실패 결과
- 일괄 발송 대상은 현재 사용자 범위(scope) 안의 Active 회원만

관련 파일:
- shepherd.services.scope      : 발송 대상 범위
- shepherd.routers.messaging   : 발송 API

"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import quote

import httpx
from sqlalchemy import select
from sqlalchemy.orm import Session

from shepherd.core.config import settings
from shepherd.core.timeutil import utcnow
from shepherd.models.member import Member, MemberStatus
from shepherd.services.attendance import get_visible_event
from shepherd.services.scope import ActingUser, resolve_scope, member_condition, get_member_in_scope

logger = logging.getLogger(__name__)

ARKESEL_SEND_URL = "https://sms.arkesel.com/api/v2/sms/send"
RESEND_SEND_URL = "https://api.resend.com/emails"

CHANNELS = ("sms", "email")


@dataclass
class GatewayResult:
    success: bool
    message: str | None = None
    message_id: str | None = None


@dataclass
class BulkSendResult:
    sent: int = 0
    failed: int = 0
    total: int = 0
    errors: list[str] = field(default_factory=list)

    def add(self, result: GatewayResult, label: str) -> None:
        self.total += 1
        if result.success:
            self.sent += 1
        else:
            self.failed += 1
            self.errors.append(f"{label}: {result.message}")


def format_phone_number(phone: str) -> str:
    cleaned = re.sub(r"\D", "", phone or "")
    if cleaned.startswith("0"):
        cleaned = settings.DEFAULT_COUNTRY_CODE + cleaned[1:]
    return f"+{cleaned}"


def whatsapp_link(phone: str, message: str | None = None) -> str:
    link = f"https://wa.me/{format_phone_number(phone).lstrip('+')}"
    if message:
        link += f"?text={quote(message)}"
    return link


def call_link(phone: str) -> str:
    return f"tel:{format_phone_number(phone)}"


# 메시지 템플릿
def event_reminder_text(member_name: str, event_name: str, event_date: str) -> str:
    return f"Hi {member_name}! Reminder: {event_name} on {event_date}. We hope to see you there! - Agape Ministry"


def birthday_wish_text(member_name: str) -> str:
    return f"Happy Birthday {member_name}! May God bless you abundantly today and always. With love, Agape Ministry Family"


def follow_up_text(member_name: str) -> str:
    return (
        f"Hi {member_name}, we're thinking of you! How are you doing? "
        "Feel free to reach out if you need anything. God bless! - Agape Ministry"
    )


def announcement_text(message: str) -> str:
    return f"Agape Ministry: {message}"


def _html(text: str) -> str:
    return "<p>" + text.replace("\n", "<br>") + "</p>"


"""
외부 메시지 게이트웨이

- send_sms   : Arkesel v2 SMS API (header api-key)
- send_email : Resend API (Bearer 토큰)
- 두 함수 모두 예외 대신 GatewayResult 반환

"""

class MessageGateway:
    def __init__(
        self,
        arkesel_api_key: str | None,
        sender_id: str,
        resend_api_key: str | None,
        from_email: str,
        timeout: float = 20.0,
    ):
        self.arkesel_api_key = arkesel_api_key
        self.sender_id = sender_id
        self.resend_api_key = resend_api_key
        self.from_email = from_email
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "MessageGateway":
        return cls(
            settings.ARKESEL_API_KEY,
            settings.ARKESEL_SENDER_ID,
            settings.RESEND_API_KEY,
            settings.RESEND_FROM_EMAIL,
            timeout=settings.GATEWAY_TIMEOUT_SECONDS,
        )

    def send_sms(self, recipients: list[str], message: str) -> GatewayResult:
        if not self.arkesel_api_key:
            logger.warning("ARKESEL_API_KEY not configured")
            return GatewayResult(False, "SMS not configured")

        payload = {
            "sender": self.sender_id,
            "message": message,
            "recipients": [format_phone_number(p) for p in recipients],
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    ARKESEL_SEND_URL,
                    headers={"api-key": self.arkesel_api_key, "Content-Type": "application/json"},
                    json=payload,
                )
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Arkesel request failed", exc_info=exc)
            return GatewayResult(False, str(exc) or type(exc).__name__)

        if data.get("status") == "success":
            body = data.get("data")
            message_id = body.get("id") if isinstance(body, dict) else None
            return GatewayResult(True, "SMS sent", message_id)

        logger.warning("Arkesel returned error: %s", data)
        return GatewayResult(False, data.get("message") or "SMS send failed")

    def send_email(self, to: list[str], subject: str, html: str, text: str | None = None) -> GatewayResult:
        if not self.resend_api_key:
            logger.warning("RESEND_API_KEY not configured")
            return GatewayResult(False, "Email not configured")

        payload: dict[str, object] = {
            "from": self.from_email,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    RESEND_SEND_URL,
                    headers={"Authorization": f"Bearer {self.resend_api_key}", "Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.warning("Resend request failed", exc_info=exc)
            return GatewayResult(False, str(exc) or type(exc).__name__)

        if response.status_code >= 400:
            try:
                message = response.json().get("message")
            except ValueError:
                message = None
            logger.warning("Resend returned %s", response.status_code)
            return GatewayResult(False, message or f"Email send failed ({response.status_code})")

        try:
            message_id = response.json().get("id")
        except ValueError:
            message_id = None
        return GatewayResult(True, "Email sent", message_id)


def _send_to_member(gateway: MessageGateway, member: Member, channel: str, subject: str, message: str) -> GatewayResult:
    if channel == "sms":
        if not member.phone:
            return GatewayResult(False, "Member has no phone number")
        return gateway.send_sms([member.phone], message)
    if channel == "email":
        if not member.email:
            return GatewayResult(False, "Member has no email")
        return gateway.send_email([member.email], subject, _html(message), text=message)
    raise ValueError(f"Unsupported channel: {channel}")


"""
개별 회원에게 메시지 발송

- 범위 밖 회원이면 ScopeViolation
- 수신 연락처(전화/이메일)가 없으면 ValueError (게이트웨이 호출 X)

"""

def send_member_notification(
    db: Session,
    acting_user: ActingUser,
    gateway: MessageGateway,
    member_id: uuid.UUID,
    channel: str,
    message: str,
    subject: str | None = None,
) -> GatewayResult:
    if channel not in CHANNELS:
        raise ValueError(f"Unsupported channel: {channel}")

    member = get_member_in_scope(db, acting_user, member_id)

    if channel == "sms" and not member.phone:
        raise ValueError("Member has no phone number")
    if channel == "email" and not member.email:
        raise ValueError("Member has no email")

    return _send_to_member(gateway, member, channel, subject or "Message from Agape Ministry", message)


def _active_members_in_scope(db: Session, acting_user: ActingUser) -> list[Member]:
    scope = resolve_scope(db, acting_user)
    return list(
        db.scalars(
            select(Member)
            .where(Member.status == MemberStatus.ACTIVE, member_condition(scope))
            .order_by(Member.last_name, Member.first_name)
        ).all()
    )


def _broadcast(
    gateway: MessageGateway,
    members: list[Member],
    channels: list[str],
    subject: str,
    render,
) -> dict[str, BulkSendResult]:
    for channel in channels:
        if channel not in CHANNELS:
            raise ValueError(f"Unsupported channel: {channel}")

    results = {channel: BulkSendResult() for channel in channels}
    for member in members:
        text = render(member)
        for channel in channels:
            # 연락처가 없는 회원은 해당 채널 집계에서 제외
            if channel == "sms" and not member.phone:
                continue
            if channel == "email" and not member.email:
                continue
            results[channel].add(_send_to_member(gateway, member, channel, subject, text), member.full_name)
    return results


def send_announcement(
    db: Session,
    acting_user: ActingUser,
    gateway: MessageGateway,
    message: str,
    channels: list[str],
    subject: str | None = None,
) -> dict[str, BulkSendResult]:
    members = _active_members_in_scope(db, acting_user)
    return _broadcast(
        gateway,
        members,
        channels,
        subject or "Announcement",
        lambda m: announcement_text(message),
    )


def send_event_notification(
    db: Session,
    acting_user: ActingUser,
    gateway: MessageGateway,
    event_id: uuid.UUID,
    channels: list[str],
) -> dict[str, BulkSendResult]:
    event = get_visible_event(db, acting_user, event_id)

    event_date = event.date.strftime("%a %d %b %Y, %H:%M")
    members = _active_members_in_scope(db, acting_user)
    return _broadcast(
        gateway,
        members,
        channels,
        f"Reminder: {event.name}",
        lambda m: event_reminder_text(m.first_name, event.name, event_date),
    )


def send_birthday_wishes(
    db: Session,
    acting_user: ActingUser,
    gateway: MessageGateway,
    channels: list[str],
    now: datetime | None = None,
) -> dict[str, BulkSendResult]:
    today = (now or utcnow()).date()
    members = [
        m for m in _active_members_in_scope(db, acting_user)
        if m.birthday and (m.birthday.month, m.birthday.day) == (today.month, today.day)
    ]
    return _broadcast(
        gateway,
        members,
        channels,
        "Happy Birthday!",
        lambda m: birthday_wish_text(m.first_name),
    )
