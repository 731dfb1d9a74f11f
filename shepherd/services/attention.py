"""
services/attention.py

대시보드 "관심 필요(Needs Attention)" 목록 계산 및 알림 해제 서비스.

목록 구성 (비활동 먼저, 그 다음 기한 초과):
- inactive : Active 회원 중 최근 4주 이내 행사에 Present 기록이 없고,
             최근 1주 이내 완료된 심방(FollowUp)도 없는 회원 (최대 5명)
- overdue  : scheduled_at < now 이고 completed_at 이 없는 심방 (최대 5건)

알림 해제(dismiss):
- overdue  → 해당 FollowUp 삭제
- inactive → 완료된 FollowUp(Other / Reached) 을 추가하여 1주간 알림 숨김

설계 원칙:
- 두 목록 모두 현재 사용자 범위(scope)를 회원 기준으로 적용
- 현재 사용자가 없으면 빈 목록 (예외 X)
- now 는 인자로 주입 가능 (경계값 테스트용)

관련 파일:
- shepherd.services.scope         : 범위 필터
- shepherd.routers.attention      : 조회 / 해제 API

"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from shepherd.core.timeutil import utcnow, as_utc
from shepherd.models.event import Event, AttendanceRecord, AttendanceStatus
from shepherd.models.member import Member, MemberStatus
from shepherd.models.pastoral import FollowUp, FollowUpType, FollowUpOutcome
from shepherd.services.scope import (
    ActingUser,
    ScopeFilter,
    NotFound,
    resolve_scope,
    member_condition,
    is_empty,
    get_member_in_scope,
)

INACTIVE_WINDOW = timedelta(weeks=4)
SNOOZE_WINDOW = timedelta(weeks=1)
ATTENTION_LIMIT = 5

INACTIVE_REASON = "Inactive"
OVERDUE_REASON = "Overdue Follow-up"
DISMISS_NOTE = "Alert dismissed from dashboard (System Check-in)"


@dataclass(frozen=True)
class AttentionItem:
    member_id: uuid.UUID
    type: str
    reference_id: uuid.UUID
    first_name: str
    last_name: str
    reason: str
    days_overdue: int | None


@dataclass(frozen=True)
class DismissFollowUp:
    follow_up_id: uuid.UUID


@dataclass(frozen=True)
class DismissMember:
    member_id: uuid.UUID


DismissTarget = DismissFollowUp | DismissMember


def parse_dismiss_target(type_: str, reference_id: uuid.UUID) -> DismissTarget:
    if type_ == "overdue":
        return DismissFollowUp(reference_id)
    if type_ == "inactive":
        return DismissMember(reference_id)
    raise ValueError("Invalid type")


def find_inactive_members(db: Session, scope: ScopeFilter, now: datetime) -> list[AttentionItem]:
    recent_cutoff = now - INACTIVE_WINDOW
    snooze_cutoff = now - SNOOZE_WINDOW

    recent_attendees = (
        select(AttendanceRecord.member_id)
        .join(Event, Event.id == AttendanceRecord.event_id)
        .where(AttendanceRecord.status == AttendanceStatus.PRESENT, Event.date >= recent_cutoff)
    )
    recently_contacted = (
        select(FollowUp.member_id)
        .where(FollowUp.completed_at.is_not(None), FollowUp.completed_at >= snooze_cutoff)
    )
    last_seen = (
        select(AttendanceRecord.member_id.label("member_id"), func.max(Event.date).label("last_seen"))
        .join(Event, Event.id == AttendanceRecord.event_id)
        .where(AttendanceRecord.status == AttendanceStatus.PRESENT)
        .group_by(AttendanceRecord.member_id)
        .subquery()
    )

    rows = db.execute(
        select(Member.id, Member.first_name, Member.last_name, last_seen.c.last_seen)
        .outerjoin(last_seen, last_seen.c.member_id == Member.id)
        .where(
            Member.status == MemberStatus.ACTIVE,
            Member.id.not_in(recent_attendees),
            Member.id.not_in(recently_contacted),
            member_condition(scope),
        )
        # 한 번도 출석하지 않은 회원이 가장 먼저
        .order_by(last_seen.c.last_seen.asc().nulls_first(), Member.last_name, Member.first_name)
        .limit(ATTENTION_LIMIT)
    ).all()

    return [
        AttentionItem(
            member_id=member_id,
            type="inactive",
            reference_id=member_id,
            first_name=first_name,
            last_name=last_name,
            reason=INACTIVE_REASON,
            days_overdue=(now - as_utc(seen)).days if seen is not None else None,
        )
        for member_id, first_name, last_name, seen in rows
    ]


def find_overdue_follow_ups(db: Session, scope: ScopeFilter, now: datetime) -> list[AttentionItem]:
    rows = db.execute(
        select(FollowUp.id, FollowUp.scheduled_at, Member.id, Member.first_name, Member.last_name)
        .join(Member, Member.id == FollowUp.member_id)
        .where(
            FollowUp.scheduled_at.is_not(None),
            FollowUp.scheduled_at < now,
            FollowUp.completed_at.is_(None),
            member_condition(scope),
        )
        .order_by(FollowUp.scheduled_at.asc())
        .limit(ATTENTION_LIMIT)
    ).all()

    return [
        AttentionItem(
            member_id=member_id,
            type="overdue",
            reference_id=follow_up_id,
            first_name=first_name,
            last_name=last_name,
            reason=OVERDUE_REASON,
            days_overdue=(now - as_utc(scheduled_at)).days,
        )
        for follow_up_id, scheduled_at, member_id, first_name, last_name in rows
    ]


def get_members_needing_attention(
    db: Session,
    acting_user: ActingUser | None,
    now: datetime | None = None,
) -> list[AttentionItem]:
    now = now or utcnow()
    scope = resolve_scope(db, acting_user)
    if is_empty(scope):
        return []
    return find_inactive_members(db, scope, now) + find_overdue_follow_ups(db, scope, now)


"""
알림 해제

- DismissFollowUp : FollowUp 삭제 (이미 삭제된 id 면 NotFound)
- DismissMember   : 현재 사용자 명의의 완료 FollowUp 추가 (1주 snooze)
- 두 경우 모두 대상 회원이 범위 밖이면 ScopeViolation

"""

def dismiss_action_item(
    db: Session,
    acting_user: ActingUser,
    target: DismissTarget,
    now: datetime | None = None,
) -> str:
    now = now or utcnow()

    if isinstance(target, DismissFollowUp):
        follow_up = db.get(FollowUp, target.follow_up_id)
        if follow_up is None:
            raise NotFound("Follow-up not found")
        get_member_in_scope(db, acting_user, follow_up.member_id)
        db.delete(follow_up)
        db.flush()
        return "Follow-up dismissed"

    if isinstance(target, DismissMember):
        member = get_member_in_scope(db, acting_user, target.member_id)
        db.add(
            FollowUp(
                member_id=member.id,
                user_id=acting_user.id,
                type=FollowUpType.OTHER,
                notes=DISMISS_NOTE,
                outcome=FollowUpOutcome.REACHED,
                completed_at=now,
                created_at=now,
            )
        )
        db.flush()
        return "Alert snoozed for 1 week"

    raise ValueError("Invalid type")
