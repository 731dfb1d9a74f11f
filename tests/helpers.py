# tests/helpers.py
import uuid
from datetime import datetime

from sqlalchemy.orm import Session

from shepherd.core.security import create_access_token
from shepherd.models.camp import Camp
from shepherd.models.event import Event, EventType, AttendanceRecord, AttendanceStatus
from shepherd.models.member import Member, MemberRole, MemberStatus
from shepherd.models.pastoral import MemberAssignment
from shepherd.models.user import User, Role
from shepherd.services.messaging import MessageGateway, GatewayResult


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def headers_for(user: User) -> dict:
    return auth_header(create_access_token(str(user.id), email=user.email))


def create_camp_in_db(db: Session, name: str = "Camp 1") -> Camp:
    camp = Camp(name=name)
    db.add(camp)
    db.commit()
    db.refresh(camp)
    return camp


def create_member_in_db(
    db: Session,
    *,
    first_name: str = "Kwame",
    last_name: str = "Mensah",
    camp: Camp | None = None,
    role: MemberRole = MemberRole.MEMBER,
    status: MemberStatus = MemberStatus.ACTIVE,
    **fields,
) -> Member:
    member = Member(
        first_name=first_name,
        last_name=last_name,
        camp_id=camp.id if camp else None,
        role=role,
        status=status,
        **fields,
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def create_user_in_db(
    db: Session,
    role: Role,
    *,
    camp: Camp | None = None,
    member: Member | None = None,
    email: str | None = None,
) -> User:
    user = User(
        email=email or f"{role.value.lower()}_{uuid.uuid4().hex[:6]}@test.com",
        role=role,
        camp_id=camp.id if camp else None,
        member_id=member.id if member else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def assign_in_db(db: Session, shepherd: User, *members: Member) -> None:
    for member in members:
        db.add(MemberAssignment(member_id=member.id, shepherd_id=shepherd.id))
    db.commit()


def create_event_in_db(
    db: Session,
    *,
    date: datetime,
    name: str = "Sunday Service",
    camp: Camp | None = None,
) -> Event:
    event = Event(name=name, date=date, type=EventType.SERVICE, camp_id=camp.id if camp else None)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def mark_present_in_db(db: Session, event: Event, member: Member) -> AttendanceRecord:
    record = AttendanceRecord(event_id=event.id, member_id=member.id, status=AttendanceStatus.PRESENT)
    db.add(record)
    db.commit()
    return record


class FakeGateway(MessageGateway):
    """외부 호출 없이 발송 내역만 기록하는 게이트웨이"""

    def __init__(self, fail: bool = False):
        super().__init__(None, "AgapeMin", None, "test@example.com")
        self.fail = fail
        self.sms: list[tuple[list[str], str]] = []
        self.emails: list[tuple[list[str], str, str]] = []

    def send_sms(self, recipients: list[str], message: str) -> GatewayResult:
        if self.fail:
            return GatewayResult(False, "SMS send failed")
        self.sms.append((recipients, message))
        return GatewayResult(True, "SMS sent", f"sms-{len(self.sms)}")

    def send_email(self, to: list[str], subject: str, html: str, text: str | None = None) -> GatewayResult:
        if self.fail:
            return GatewayResult(False, "Email send failed")
        self.emails.append((to, subject, html))
        return GatewayResult(True, "Email sent", f"email-{len(self.emails)}")
