"""
services/follow_ups.py

심방/연락(FollowUp) 기록 서비스.

주요 기능:
- 심방 기록 생성 (예약 연락은 scheduled_at 지정)
- 예약 연락 완료 처리 / 삭제
- 회원별 심방 이력
- 전체 심방 목록 (필터 + 페이지네이션) 및 통계

설계 원칙:
- 모든 조회/쓰기는 대상 회원의 범위(scope) 기준
- 기록 작성자(user_id)는 항상 현재 사용자

"""

import math
import uuid
from datetime import datetime, timedelta, time, timezone

from sqlalchemy import select, func, or_, desc
from sqlalchemy.orm import Session, aliased

from shepherd.core.timeutil import utcnow
from shepherd.models.member import Member
from shepherd.models.pastoral import FollowUp, FollowUpType, FollowUpOutcome
from shepherd.models.user import User
from shepherd.services.scope import (
    ActingUser,
    NotFound,
    resolve_scope,
    member_condition,
    get_member_in_scope,
)


def create_follow_up(
    db: Session,
    acting_user: ActingUser,
    member_id: uuid.UUID,
    type: FollowUpType,
    notes: str | None = None,
    outcome: FollowUpOutcome | None = None,
    scheduled_at: datetime | None = None,
    now: datetime | None = None,
) -> FollowUp:
    now = now or utcnow()
    member = get_member_in_scope(db, acting_user, member_id)

    follow_up = FollowUp(
        member_id=member.id,
        user_id=acting_user.id,
        type=type,
        notes=notes,
        outcome=outcome,
        scheduled_at=scheduled_at,
        created_at=now,
    )
    db.add(follow_up)
    db.flush()
    return follow_up


def _get_follow_up_in_scope(db: Session, acting_user: ActingUser, follow_up_id: uuid.UUID) -> FollowUp:
    follow_up = db.get(FollowUp, follow_up_id)
    if follow_up is None:
        raise NotFound("Follow-up not found")
    get_member_in_scope(db, acting_user, follow_up.member_id)
    return follow_up


def complete_follow_up(
    db: Session,
    acting_user: ActingUser,
    follow_up_id: uuid.UUID,
    outcome: FollowUpOutcome | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> FollowUp:
    follow_up = _get_follow_up_in_scope(db, acting_user, follow_up_id)
    if follow_up.completed_at is not None:
        raise ValueError("Follow-up already completed")

    follow_up.completed_at = now or utcnow()
    if outcome is not None:
        follow_up.outcome = outcome
    if notes:
        follow_up.notes = notes
    db.flush()
    return follow_up


def delete_follow_up(db: Session, acting_user: ActingUser, follow_up_id: uuid.UUID) -> None:
    follow_up = _get_follow_up_in_scope(db, acting_user, follow_up_id)
    db.delete(follow_up)
    db.flush()


def member_follow_ups(db: Session, acting_user: ActingUser, member_id: uuid.UUID) -> list[FollowUp]:
    member = get_member_in_scope(db, acting_user, member_id)
    return list(
        db.scalars(
            select(FollowUp).where(FollowUp.member_id == member.id).order_by(desc(FollowUp.created_at))
        ).all()
    )


"""
전체 심방 목록 조회

- type / outcome / user_id(작성자) / search(회원 이름·작성자 이름·메모) 필터
- start_date ~ end_date 는 작성일 기준 (end_date 는 해당 일의 끝까지 포함)
- 반환: (행 목록, 전체 건수)

"""

def list_follow_ups(
    db: Session,
    acting_user: ActingUser | None,
    page: int = 1,
    limit: int = 10,
    type: FollowUpType | None = None,
    outcome: FollowUpOutcome | None = None,
    user_id: uuid.UUID | None = None,
    search: str | None = None,
    start_date=None,
    end_date=None,
) -> tuple[list[tuple[FollowUp, Member, User | None, Member | None]], int]:
    scope = resolve_scope(db, acting_user)
    Shepherd = aliased(Member)

    conditions = [member_condition(scope)]
    if type is not None:
        conditions.append(FollowUp.type == type)
    if outcome is not None:
        conditions.append(FollowUp.outcome == outcome)
    if user_id is not None:
        conditions.append(FollowUp.user_id == user_id)
    if start_date is not None:
        conditions.append(FollowUp.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date is not None:
        conditions.append(FollowUp.created_at < datetime.combine(end_date, time.min, tzinfo=timezone.utc) + timedelta(days=1))
    if search:
        pattern = f"%{search.lower()}%"
        conditions.append(
            or_(
                func.lower(Member.first_name).like(pattern),
                func.lower(Member.last_name).like(pattern),
                func.lower(Shepherd.first_name).like(pattern),
                func.lower(FollowUp.notes).like(pattern),
            )
        )

    base = (
        select(FollowUp, Member, User, Shepherd)
        .join(Member, Member.id == FollowUp.member_id)
        .outerjoin(User, User.id == FollowUp.user_id)
        .outerjoin(Shepherd, Shepherd.id == User.member_id)
        .where(*conditions)
    )

    total = db.scalar(select(func.count()).select_from(base.subquery())) or 0
    rows = db.execute(
        base.order_by(desc(FollowUp.created_at)).limit(limit).offset((page - 1) * limit)
    ).all()
    return [tuple(row) for row in rows], total


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def follow_up_stats(db: Session, acting_user: ActingUser | None, now: datetime | None = None) -> dict:
    now = now or utcnow()
    scope = resolve_scope(db, acting_user)

    def scoped(stmt):
        return stmt.select_from(FollowUp).join(Member, Member.id == FollowUp.member_id).where(member_condition(scope))

    total = db.scalar(scoped(select(func.count()))) or 0
    this_week = db.scalar(
        scoped(select(func.count())).where(FollowUp.created_at >= now - timedelta(days=7))
    ) or 0
    outcomes = db.execute(scoped(select(FollowUp.outcome, func.count())).group_by(FollowUp.outcome)).all()
    types = db.execute(scoped(select(FollowUp.type, func.count())).group_by(FollowUp.type)).all()

    return {
        "total": total,
        "this_week": this_week,
        "outcomes": [{"name": o.value if o else "Unknown", "value": c} for o, c in outcomes],
        "types": [{"name": t.value, "value": c} for t, c in types],
    }
