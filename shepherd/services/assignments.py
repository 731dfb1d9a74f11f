"""
services/assignments.py

목자(Shepherd) ↔ 회원 배정 및 리더 ↔ 캠퍼스 배정 서비스.

규칙:
- 배정/해제는 Admin, Leader 만 가능 (Leader 는 자신의 캠프 회원/목자만)
- 한 회원은 한 명의 목자에게만 배정 (새로 배정하면 기존 배정은 교체)
- 리더 캠퍼스 목록은 전체 교체 방식 (Admin 전용)
- 배정 가능 회원: 범위 안에서 아직 어떤 목자에게도 배정되지 않은 회원

"""

import uuid
from datetime import datetime

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from shepherd.core.timeutil import utcnow
from shepherd.models.camp import Camp
from shepherd.models.member import Member, Campus
from shepherd.models.pastoral import MemberAssignment, LeaderCampus
from shepherd.models.user import User, Role
from shepherd.services.scope import (
    ActingUser,
    ScopeViolation,
    NotFound,
    resolve_scope,
    member_condition,
    get_member_in_scope,
    require_role,
)


def _get_staff_user(db: Session, acting_user: ActingUser, user_id: uuid.UUID, *roles: Role) -> User:
    user = db.get(User, user_id)
    if user is None or user.role not in roles:
        raise NotFound("User not found")
    if acting_user.role == Role.LEADER and user.camp_id != acting_user.camp_id:
        raise ScopeViolation("User belongs to another camp")
    return user


def assign_members(
    db: Session,
    acting_user: ActingUser,
    shepherd_id: uuid.UUID,
    member_ids: list[uuid.UUID],
    now: datetime | None = None,
) -> int:
    require_role(acting_user, Role.ADMIN, Role.LEADER)
    shepherd = _get_staff_user(db, acting_user, shepherd_id, Role.SHEPHERD)
    scope = resolve_scope(db, acting_user)

    members = [get_member_in_scope(db, acting_user, member_id, scope=scope) for member_id in dict.fromkeys(member_ids)]

    assigned = 0
    for member in members:
        current = db.scalars(select(MemberAssignment).where(MemberAssignment.member_id == member.id)).all()
        if any(a.shepherd_id == shepherd.id for a in current):
            continue
        for assignment in current:
            db.delete(assignment)
        db.add(MemberAssignment(member_id=member.id, shepherd_id=shepherd.id, assigned_at=now or utcnow()))
        assigned += 1
    db.flush()
    return assigned


def remove_assignment(db: Session, acting_user: ActingUser, shepherd_id: uuid.UUID, member_id: uuid.UUID) -> None:
    require_role(acting_user, Role.ADMIN, Role.LEADER)
    get_member_in_scope(db, acting_user, member_id)

    assignment = db.scalar(
        select(MemberAssignment).where(
            MemberAssignment.shepherd_id == shepherd_id,
            MemberAssignment.member_id == member_id,
        )
    )
    if assignment is None:
        raise NotFound("Assignment not found")
    db.delete(assignment)
    db.flush()


def shepherd_members(
    db: Session,
    acting_user: ActingUser,
    shepherd_id: uuid.UUID,
) -> list[tuple[Member, datetime]]:
    if acting_user.role == Role.SHEPHERD:
        if acting_user.id != shepherd_id:
            raise ScopeViolation("Shepherds can only view their own members")
    else:
        _get_staff_user(db, acting_user, shepherd_id, Role.SHEPHERD)

    rows = db.execute(
        select(Member, MemberAssignment.assigned_at)
        .join(MemberAssignment, MemberAssignment.member_id == Member.id)
        .where(MemberAssignment.shepherd_id == shepherd_id)
        .order_by(Member.last_name, Member.first_name)
    ).all()
    return [(member, assigned_at) for member, assigned_at in rows]


def list_staff(db: Session, acting_user: ActingUser, *roles: Role) -> list[tuple[User, Member | None]]:
    require_role(acting_user, Role.ADMIN, Role.LEADER)

    stmt = (
        select(User, Member)
        .outerjoin(Member, Member.id == User.member_id)
        .where(User.role.in_(roles))
        .order_by(Member.first_name, User.email)
    )
    if acting_user.role == Role.LEADER:
        stmt = stmt.where(User.camp_id == acting_user.camp_id)
    return [(user, member) for user, member in db.execute(stmt).all()]


def leader_campuses(db: Session, leader_id: uuid.UUID) -> list[Campus]:
    return list(
        db.scalars(select(LeaderCampus.campus).where(LeaderCampus.leader_id == leader_id)).all()
    )


def replace_leader_campuses(db: Session, leader_id: uuid.UUID, campuses: list[Campus]) -> list[Campus]:
    leader = db.get(User, leader_id)
    if leader is None or leader.role not in (Role.LEADER, Role.ADMIN):
        raise NotFound("Leader not found")

    db.execute(delete(LeaderCampus).where(LeaderCampus.leader_id == leader.id))
    unique = list(dict.fromkeys(campuses))
    for campus in unique:
        db.add(LeaderCampus(leader_id=leader.id, campus=campus))
    db.flush()
    return unique


def available_members(db: Session, acting_user: ActingUser) -> list[tuple[Member, str | None]]:
    require_role(acting_user, Role.ADMIN, Role.LEADER)
    scope = resolve_scope(db, acting_user)

    rows = db.execute(
        select(Member, Camp.name)
        .outerjoin(Camp, Camp.id == Member.camp_id)
        .where(
            member_condition(scope),
            Member.id.not_in(select(MemberAssignment.member_id)),
        )
        .order_by(Member.last_name, Member.first_name)
    ).all()
    return [(member, camp_name) for member, camp_name in rows]
