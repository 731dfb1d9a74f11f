"""
services/camps.py

캠프(Camp) 관리 서비스.

- 목록 (회원 수 포함), 상세 (회원 / 통계 / 리더), 캠프 대시보드
- 생성 / 수정 / 삭제는 Admin 전용 (라우터 의존성에서 검증)
- 회원이 남아 있는 캠프는 삭제 불가
- Admin 이 아닌 사용자는 자신의 캠프만 조회

"""

import uuid

from sqlalchemy import select, func, case, desc
from sqlalchemy.orm import Session

from shepherd.models.camp import Camp
from shepherd.models.event import Event
from shepherd.models.member import Member, MemberRole, MemberStatus, STAFF_MEMBER_ROLES
from shepherd.models.pastoral import FollowUp
from shepherd.models.user import User, Role
from shepherd.services.scope import ActingUser, ScopeViolation, NotFound, resolve_scope, member_condition


def get_visible_camp(db: Session, acting_user: ActingUser, camp_id: uuid.UUID) -> Camp:
    camp = db.get(Camp, camp_id)
    if camp is None:
        raise NotFound("Camp not found")
    if acting_user.role != Role.ADMIN and camp.id != acting_user.camp_id:
        raise ScopeViolation("Camp is outside your scope")
    return camp


def list_camps(db: Session, acting_user: ActingUser) -> list[tuple[Camp, int]]:
    member_count = (
        select(func.count(Member.id)).where(Member.camp_id == Camp.id).correlate(Camp).scalar_subquery()
    )
    stmt = select(Camp, member_count).order_by(Camp.name)
    if acting_user.role != Role.ADMIN:
        if acting_user.camp_id is None:
            return []
        stmt = stmt.where(Camp.id == acting_user.camp_id)
    return [(camp, count) for camp, count in db.execute(stmt).all()]


def get_camp_details(db: Session, acting_user: ActingUser, camp_id: uuid.UUID) -> dict:
    camp = get_visible_camp(db, acting_user, camp_id)
    scope = resolve_scope(db, acting_user)

    members = db.scalars(
        select(Member)
        .where(Member.camp_id == camp.id, member_condition(scope))
        .order_by(Member.last_name, Member.first_name)
    ).all()

    stats = {
        "total_members": len(members),
        "active_members": sum(1 for m in members if m.status == MemberStatus.ACTIVE),
        "leaders": sum(1 for m in members if m.role in STAFF_MEMBER_ROLES),
        "new_converts": sum(1 for m in members if m.role == MemberRole.NEW_CONVERT),
    }
    leader = db.get(Member, camp.leader_id) if camp.leader_id else None
    return {"camp": camp, "leader": leader, "members": members, "stats": stats}


def _ensure_leader_exists(db: Session, leader_id: uuid.UUID | None) -> None:
    if leader_id is not None and db.get(Member, leader_id) is None:
        raise NotFound("Leader member not found")


def find_camp_by_name(db: Session, name: str) -> Camp | None:
    return db.scalar(select(Camp).where(func.lower(Camp.name) == name.strip().lower()))


def create_camp(db: Session, name: str, leader_id: uuid.UUID | None = None) -> Camp:
    name = name.strip()
    if not name:
        raise ValueError("Camp name is required")
    if find_camp_by_name(db, name) is not None:
        raise ValueError("Camp already exists")
    _ensure_leader_exists(db, leader_id)

    camp = Camp(name=name, leader_id=leader_id)
    db.add(camp)
    db.flush()
    return camp


def update_camp(db: Session, camp_id: uuid.UUID, data: dict) -> Camp:
    camp = db.get(Camp, camp_id)
    if camp is None:
        raise NotFound("Camp not found")

    if "name" in data and data["name"] is not None:
        name = data["name"].strip()
        if not name:
            raise ValueError("Camp name is required")
        existing = find_camp_by_name(db, name)
        if existing is not None and existing.id != camp.id:
            raise ValueError("Camp already exists")
        camp.name = name
    if "leader_id" in data:
        _ensure_leader_exists(db, data["leader_id"])
        camp.leader_id = data["leader_id"]
    db.flush()
    return camp


def delete_camp(db: Session, camp_id: uuid.UUID) -> None:
    camp = db.get(Camp, camp_id)
    if camp is None:
        raise NotFound("Camp not found")

    member_count = db.scalar(select(func.count()).select_from(Member).where(Member.camp_id == camp.id)) or 0
    if member_count > 0:
        raise ValueError("Cannot delete camp with members. Reassign members first.")

    # 캠프 소속 계정/행사는 연결만 해제
    for user in db.scalars(select(User).where(User.camp_id == camp.id)).all():
        user.camp_id = None
    for event in db.scalars(select(Event).where(Event.camp_id == camp.id)).all():
        event.camp_id = None

    db.delete(camp)
    db.flush()


def get_camp_dashboard(db: Session, acting_user: ActingUser, camp_id: uuid.UUID) -> dict:
    camp = get_visible_camp(db, acting_user, camp_id)
    scope = resolve_scope(db, acting_user)

    total, active, inactive, new_converts = db.execute(
        select(
            func.count(Member.id),
            func.sum(case((Member.status == MemberStatus.ACTIVE, 1), else_=0)),
            func.sum(case((Member.status == MemberStatus.INACTIVE, 1), else_=0)),
            func.sum(case((Member.role == MemberRole.NEW_CONVERT, 1), else_=0)),
        ).where(Member.camp_id == camp.id)
    ).one()

    recent_follow_ups = db.execute(
        select(FollowUp, Member)
        .join(Member, Member.id == FollowUp.member_id)
        .where(Member.camp_id == camp.id, member_condition(scope))
        .order_by(desc(FollowUp.created_at))
        .limit(10)
    ).all()

    shepherds = db.scalars(
        select(User).where(User.camp_id == camp.id, User.role == Role.SHEPHERD).order_by(User.email)
    ).all()

    return {
        "camp": camp,
        "stats": {
            "total": total or 0,
            "active": active or 0,
            "inactive": inactive or 0,
            "new_converts": new_converts or 0,
        },
        "recent_follow_ups": recent_follow_ups,
        "shepherds": shepherds,
    }
