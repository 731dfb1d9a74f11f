"""
services/dashboard.py

메인 대시보드 통계 서비스.

- 범위 안 전체 / Active 회원 수
- 이번 달 등록된 New Convert 수
- 오늘 생일인 회원 수, 7일 이내 생일인 Active 회원 (최대 5명)
- 최근 지난 행사 6건의 Present / Absent 집계 (오래된 순)
- 다가오는 행사 5건

NOTE:
- 생일(MM-DD) 비교는 DB 함수(to_char 등)에 의존하지 않도록 Python 에서 처리
- 현재 사용자가 없으면 모든 값이 0 / 빈 목록

"""

from datetime import datetime, timedelta

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from shepherd.core.timeutil import utcnow
from shepherd.models.event import Event
from shepherd.models.member import Member, MemberRole, MemberStatus
from shepherd.services.attendance import event_condition, attendance_counts
from shepherd.services.scope import ActingUser, resolve_scope, member_condition

PAST_EVENT_LIMIT = 6
UPCOMING_EVENT_LIMIT = 5
BIRTHDAY_LIMIT = 5


def empty_dashboard() -> dict:
    return {
        "total_members": 0,
        "active_members": 0,
        "new_converts": 0,
        "birthdays_today": 0,
        "attendance_data": [],
        "upcoming_events": [],
        "birthdays_this_week": [],
    }


def _days_until_birthday(birthday, today) -> int:
    for offset in range(0, 8):
        day = today + timedelta(days=offset)
        if (birthday.month, birthday.day) == (day.month, day.day):
            return offset
    return -1


def get_dashboard_stats(db: Session, acting_user: ActingUser | None, now: datetime | None = None) -> dict:
    if acting_user is None:
        return empty_dashboard()

    now = now or utcnow()
    today = now.date()
    scope = resolve_scope(db, acting_user)
    in_scope = member_condition(scope)

    total_members = db.scalar(select(func.count()).select_from(Member).where(in_scope)) or 0
    active_members = db.scalar(
        select(func.count()).select_from(Member).where(in_scope, Member.status == MemberStatus.ACTIVE)
    ) or 0

    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    new_converts = db.scalar(
        select(func.count())
        .select_from(Member)
        .where(in_scope, Member.role == MemberRole.NEW_CONVERT, Member.created_at >= start_of_month)
    ) or 0

    birthday_rows = db.scalars(
        select(Member).where(in_scope, Member.birthday.is_not(None)).order_by(Member.last_name)
    ).all()
    birthdays_today = sum(
        1 for m in birthday_rows if (m.birthday.month, m.birthday.day) == (today.month, today.day)
    )
    upcoming_birthdays = sorted(
        (
            (_days_until_birthday(m.birthday, today), m)
            for m in birthday_rows
            if m.status == MemberStatus.ACTIVE
        ),
        key=lambda pair: pair[0],
    )
    birthdays_this_week = [m for days, m in upcoming_birthdays if days >= 0][:BIRTHDAY_LIMIT]

    visible = event_condition(acting_user)
    past_events = db.scalars(
        select(Event).where(visible, Event.date <= now).order_by(Event.date.desc()).limit(PAST_EVENT_LIMIT)
    ).all()
    counts = attendance_counts(db, acting_user, [e.id for e in past_events])
    attendance_data = [
        {
            "id": str(event.id),
            "name": event.name,
            "date": event.date.isoformat(),
            "present": counts[event.id].present,
            "absent": counts[event.id].absent,
        }
        for event in reversed(past_events)
    ]

    upcoming_events = db.scalars(
        select(Event).where(visible, Event.date >= now).order_by(Event.date).limit(UPCOMING_EVENT_LIMIT)
    ).all()

    return {
        "total_members": total_members,
        "active_members": active_members,
        "new_converts": new_converts,
        "birthdays_today": birthdays_today,
        "attendance_data": attendance_data,
        "upcoming_events": [
            {"id": str(e.id), "name": e.name, "date": e.date.isoformat(), "type": e.type.value}
            for e in upcoming_events
        ],
        "birthdays_this_week": [
            {
                "id": str(m.id),
                "first_name": m.first_name,
                "last_name": m.last_name,
                "birthday": m.birthday.isoformat(),
                "phone": m.phone,
            }
            for m in birthdays_this_week
        ],
    }
