"""
services/attendance.py

행사(Event) 및 출석(AttendanceRecord) 서비스.

주요 기능:
- 행사 목록 (범위 안 회원 기준 Present / Absent / Excused 집계 포함)
- 행사 생성 / 삭제
- 행사별 출석 명단 조회
- 출석 체크 (단건 upsert / 일괄 upsert)

행사 범위 규칙:
- Admin 이 만든 행사는 전체 행사 (camp_id NULL)
- Leader / Shepherd 가 만든 행사는 자신의 캠프 행사
- Admin 이 아닌 사용자는 자신의 캠프 행사 + 전체 행사만 조회

설계 원칙:
- 출석 명단/체크는 회원 범위(scope) 기준 (Shepherd 는 배정 회원만)
- 일괄 체크는 모든 회원의 범위를 먼저 검증한 뒤에 기록 (부분 반영 X)

"""

import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, delete, func, or_, true, desc
from sqlalchemy.orm import Session

from shepherd.models.event import Event, EventType, AttendanceRecord, AttendanceStatus
from shepherd.models.member import Member, MemberStatus
from shepherd.models.user import Role
from shepherd.services.scope import (
    ActingUser,
    ScopeViolation,
    NotFound,
    resolve_scope,
    member_condition,
    is_in_scope,
    get_member_in_scope,
)


@dataclass
class EventCounts:
    present: int = 0
    absent: int = 0
    excused: int = 0

    @property
    def total(self) -> int:
        return self.present + self.absent + self.excused


def event_condition(acting_user: ActingUser):
    if acting_user.role == Role.ADMIN:
        return true()
    if acting_user.camp_id is None:
        return Event.camp_id.is_(None)
    return or_(Event.camp_id == acting_user.camp_id, Event.camp_id.is_(None))


def get_visible_event(db: Session, acting_user: ActingUser, event_id: uuid.UUID) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found")
    if acting_user.role != Role.ADMIN and event.camp_id is not None and event.camp_id != acting_user.camp_id:
        raise ScopeViolation("Event belongs to another camp")
    return event


def attendance_counts(db: Session, acting_user: ActingUser, event_ids: list[uuid.UUID]) -> dict[uuid.UUID, EventCounts]:
    counts = {event_id: EventCounts() for event_id in event_ids}
    if not event_ids:
        return counts

    scope = resolve_scope(db, acting_user)
    rows = db.execute(
        select(AttendanceRecord.event_id, AttendanceRecord.status, func.count())
        .join(Member, Member.id == AttendanceRecord.member_id)
        .where(AttendanceRecord.event_id.in_(event_ids), member_condition(scope))
        .group_by(AttendanceRecord.event_id, AttendanceRecord.status)
    ).all()

    for event_id, status, count in rows:
        if status == AttendanceStatus.PRESENT:
            counts[event_id].present = count
        elif status == AttendanceStatus.ABSENT:
            counts[event_id].absent = count
        elif status == AttendanceStatus.EXCUSED:
            counts[event_id].excused = count
    return counts


def list_events(db: Session, acting_user: ActingUser) -> list[tuple[Event, EventCounts]]:
    events = db.scalars(
        select(Event).where(event_condition(acting_user)).order_by(desc(Event.date))
    ).all()
    counts = attendance_counts(db, acting_user, [e.id for e in events])
    return [(event, counts[event.id]) for event in events]


def create_event(
    db: Session,
    acting_user: ActingUser,
    name: str,
    date: datetime,
    type: EventType = EventType.SERVICE,
    description: str | None = None,
    meeting_url: str | None = None,
    recurrence: str | None = None,
    camp_id: uuid.UUID | None = None,
) -> Event:
    if acting_user.role == Role.ADMIN:
        event_camp_id = camp_id
    else:
        if acting_user.camp_id is None:
            raise ScopeViolation("No camp assigned")
        event_camp_id = acting_user.camp_id

    event = Event(
        name=name,
        date=date,
        type=type,
        description=description or None,
        meeting_url=meeting_url or None,
        recurrence=recurrence or None,
        camp_id=event_camp_id,
        created_by_id=acting_user.id,
    )
    db.add(event)
    db.flush()
    return event


def delete_event(db: Session, acting_user: ActingUser, event_id: uuid.UUID) -> None:
    event = get_visible_event(db, acting_user, event_id)
    if acting_user.role != Role.ADMIN and event.camp_id is None:
        raise ScopeViolation("Only Admin can delete global events")

    db.execute(delete(AttendanceRecord).where(AttendanceRecord.event_id == event.id))
    db.delete(event)
    db.flush()


"""
행사 출석 명단

- 범위 안의 Active 회원 전체 + 해당 행사 출석 기록(없으면 None)
- 반환: (행사, [(회원, 출석 기록 | None, can_edit)])

"""

def get_event_attendance(
    db: Session,
    acting_user: ActingUser,
    event_id: uuid.UUID,
) -> tuple[Event, list[tuple[Member, AttendanceRecord | None, bool]]]:
    event = get_visible_event(db, acting_user, event_id)
    scope = resolve_scope(db, acting_user)

    members = db.scalars(
        select(Member)
        .where(Member.status == MemberStatus.ACTIVE, member_condition(scope))
        .order_by(Member.last_name, Member.first_name)
    ).all()
    records = {
        r.member_id: r
        for r in db.scalars(select(AttendanceRecord).where(AttendanceRecord.event_id == event.id)).all()
    }
    return event, [(m, records.get(m.id), is_in_scope(scope, m)) for m in members]


def _upsert(
    db: Session,
    event_id: uuid.UUID,
    member_id: uuid.UUID,
    status: AttendanceStatus,
    notes: str | None,
) -> AttendanceRecord:
    record = db.scalar(
        select(AttendanceRecord).where(
            AttendanceRecord.event_id == event_id,
            AttendanceRecord.member_id == member_id,
        )
    )
    if record is None:
        record = AttendanceRecord(event_id=event_id, member_id=member_id, status=status, notes=notes)
        db.add(record)
    else:
        record.status = status
        if notes is not None:
            record.notes = notes
    return record


def mark_attendance(
    db: Session,
    acting_user: ActingUser,
    event_id: uuid.UUID,
    member_id: uuid.UUID,
    status: AttendanceStatus,
    notes: str | None = None,
) -> AttendanceRecord:
    event = get_visible_event(db, acting_user, event_id)
    member = get_member_in_scope(db, acting_user, member_id)
    record = _upsert(db, event.id, member.id, status, notes)
    db.flush()
    return record


def bulk_mark_attendance(
    db: Session,
    acting_user: ActingUser,
    event_id: uuid.UUID,
    entries: list[tuple[uuid.UUID, AttendanceStatus]],
) -> int:
    event = get_visible_event(db, acting_user, event_id)
    scope = resolve_scope(db, acting_user)

    # 같은 회원이 여러 번 오면 마지막 값 사용
    statuses = dict(entries)

    # 전체 검증 후 기록
    for member_id in statuses:
        get_member_in_scope(db, acting_user, member_id, scope=scope)

    for member_id, status in statuses.items():
        _upsert(db, event.id, member_id, status, None)
    db.flush()
    return len(statuses)
