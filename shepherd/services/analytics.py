"""
services/analytics.py

출석 분석 통계 서비스 (최근 12주, Present 기록만 집계).

- trends        : 행사별 Present 수 (날짜 오름차순)
- camp_stats    : 캠프별 Present 합계 (많은 순)
- top_attendees : 가장 많이 출석한 회원 10명
- top_shepherd  : 배정 회원들의 출석 합계가 가장 많은 목자

범위:
- 회원은 현재 사용자 범위(scope) 안, 행사는 볼 수 있는 행사만
- 현재 사용자가 없으면 빈 결과

"""

from datetime import datetime, timedelta

from sqlalchemy import select, func, desc, and_
from sqlalchemy.orm import Session, aliased

from shepherd.core.timeutil import utcnow, as_utc
from shepherd.models.camp import Camp
from shepherd.models.event import Event, AttendanceRecord, AttendanceStatus
from shepherd.models.member import Member
from shepherd.models.pastoral import MemberAssignment
from shepherd.models.user import User
from shepherd.services.attendance import event_condition
from shepherd.services.scope import ActingUser, resolve_scope, member_condition, is_empty

TREND_WEEKS = 12
TOP_ATTENDEE_LIMIT = 10


def empty_analytics() -> dict:
    return {"trends": [], "camp_stats": [], "top_attendees": [], "top_shepherd": None}


def _present_rows(present_count):
    return (
        select(present_count)
        .select_from(AttendanceRecord)
        .join(Event, Event.id == AttendanceRecord.event_id)
        .join(Member, Member.id == AttendanceRecord.member_id)
    )


def get_attendance_analytics(db: Session, acting_user: ActingUser | None, now: datetime | None = None) -> dict:
    if acting_user is None:
        return empty_analytics()

    scope = resolve_scope(db, acting_user)
    if is_empty(scope):
        return empty_analytics()

    now = now or utcnow()
    since = now - timedelta(weeks=TREND_WEEKS)
    present_count = func.count(AttendanceRecord.id).label("present_count")
    in_window = and_(
        AttendanceRecord.status == AttendanceStatus.PRESENT,
        Event.date >= since,
        event_condition(acting_user),
        member_condition(scope),
    )

    trends = db.execute(
        _present_rows(present_count)
        .add_columns(Event.id, Event.name, Event.date)
        .where(in_window)
        .group_by(Event.id, Event.name, Event.date)
        .order_by(Event.date)
    ).all()

    camp_stats = db.execute(
        _present_rows(present_count)
        .add_columns(Camp.id, Camp.name)
        .join(Camp, Camp.id == Member.camp_id)
        .where(in_window)
        .group_by(Camp.id, Camp.name)
        .order_by(desc(present_count), Camp.name)
    ).all()

    top_attendees = db.execute(
        _present_rows(present_count)
        .add_columns(Member.id, Member.first_name, Member.last_name, Member.profile_picture)
        .where(in_window)
        .group_by(Member.id, Member.first_name, Member.last_name, Member.profile_picture)
        .order_by(desc(present_count), Member.last_name, Member.first_name)
        .limit(TOP_ATTENDEE_LIMIT)
    ).all()

    # 목자 User → 목자 본인의 회원 프로필 (이름 표시용)
    Profile = aliased(Member)
    top_shepherd = db.execute(
        _present_rows(present_count)
        .add_columns(User.id, User.email, Profile.first_name, Profile.last_name)
        .join(MemberAssignment, MemberAssignment.member_id == AttendanceRecord.member_id)
        .join(User, User.id == MemberAssignment.shepherd_id)
        .outerjoin(Profile, Profile.id == User.member_id)
        .where(in_window)
        .group_by(User.id, User.email, Profile.first_name, Profile.last_name)
        .order_by(desc(present_count), User.email)
        .limit(1)
    ).first()

    return {
        "trends": [
            {
                "id": str(event_id),
                "name": name,
                "date": as_utc(date).isoformat(),
                "label": as_utc(date).strftime("%b %d"),
                "count": count,
            }
            for count, event_id, name, date in trends
        ],
        "camp_stats": [
            {"id": str(camp_id), "name": name, "attendance_count": count}
            for count, camp_id, name in camp_stats
        ],
        "top_attendees": [
            {
                "id": str(member_id),
                "first_name": first_name,
                "last_name": last_name,
                "profile_picture": picture,
                "attendance_count": count,
            }
            for count, member_id, first_name, last_name, picture in top_attendees
        ],
        "top_shepherd": (
            {
                "id": str(top_shepherd.id),
                "email": top_shepherd.email,
                "name": (
                    f"{top_shepherd.first_name} {top_shepherd.last_name}"
                    if top_shepherd.first_name
                    else None
                ),
                "attendance_count": top_shepherd.present_count,
            }
            if top_shepherd
            else None
        ),
    }
