"""
services/members.py

회원 명부(Member) 비즈니스 로직 모음.

주요 기능:
- 범위(scope) 적용 회원 목록 / 상세 조회
- 회원 생성 / 수정 (역할 변경 시 User 계정 동기화)
- 회원 일괄 삭제 (출석, 심방, 배정, 연결 계정 정리)
- 캠퍼스 / 카테고리별 목록 및 집계

권한 규칙:
- 생성 : Admin 은 모든 캠프, Leader 는 자신의 캠프로 고정, Shepherd 불가
- 수정 : 범위 안의 회원만. 캠프 이동과 Leader/Shepherd 역할 부여·해제는 Admin 만
- 삭제 : Admin 만

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어(commit)는 라우터에서 수행
- 범위 밖 회원은 ScopeViolation, 없는 회원은 NotFound

"""

import uuid

from sqlalchemy import select, delete, update, func, desc
from sqlalchemy.orm import Session

from shepherd.models.camp import Camp
from shepherd.models.event import AttendanceRecord
from shepherd.models.member import Member, MemberRole, Campus, Category, STAFF_MEMBER_ROLES
from shepherd.models.pastoral import MemberAssignment, FollowUp
from shepherd.models.user import User, Role
from shepherd.services.identity import IdentityProvider
from shepherd.services.roles import sync_staff_account, remove_user, StaffSyncResult
from shepherd.services.scope import (
    ActingUser,
    ScopeViolation,
    NotFound,
    resolve_scope,
    member_condition,
    is_in_scope,
    get_member_in_scope,
    require_role,
)


"""
범위 적용 회원 목록

- (Member, camp_name, can_edit) 튜플 목록
- 최근 등록 순 정렬
- campus / category 가 주어지면 추가 필터

"""

def list_members(
    db: Session,
    acting_user: ActingUser | None,
    campus: Campus | None = None,
    category: Category | None = None,
) -> list[tuple[Member, str | None, bool]]:
    scope = resolve_scope(db, acting_user)

    stmt = (
        select(Member, Camp.name)
        .outerjoin(Camp, Camp.id == Member.camp_id)
        .where(member_condition(scope))
        .order_by(desc(Member.created_at))
    )
    if campus is not None:
        stmt = stmt.where(Member.campus == campus)
    if category is not None:
        stmt = stmt.where(Member.category == category)

    return [(member, camp_name, is_in_scope(scope, member)) for member, camp_name in db.execute(stmt).all()]


def campus_stats(db: Session, acting_user: ActingUser | None) -> dict[str, int]:
    scope = resolve_scope(db, acting_user)
    stats = {c.value: 0 for c in Campus if c != Campus.OTHER}
    stats.update({c.value: 0 for c in Category if c != Category.STUDENT})

    rows = db.execute(
        select(Member.campus, func.count()).where(member_condition(scope)).group_by(Member.campus)
    ).all()
    for campus, count in rows:
        if campus.value in stats:
            stats[campus.value] = count

    rows = db.execute(
        select(Member.category, func.count()).where(member_condition(scope)).group_by(Member.category)
    ).all()
    for category, count in rows:
        if category.value in stats:
            stats[category.value] = count
    return stats


def get_member(db: Session, acting_user: ActingUser | None, member_id: uuid.UUID) -> tuple[Member, str | None]:
    member = get_member_in_scope(db, acting_user, member_id)
    camp_name = db.scalar(select(Camp.name).where(Camp.id == member.camp_id)) if member.camp_id else None
    return member, camp_name


def _ensure_email_available(db: Session, email: str | None, member_id: uuid.UUID | None = None) -> None:
    if not email:
        return
    stmt = select(Member.id).where(func.lower(Member.email) == email.lower())
    if member_id is not None:
        stmt = stmt.where(Member.id != member_id)
    if db.scalar(stmt) is not None:
        raise ValueError("Email already in use")


def _ensure_camp_exists(db: Session, camp_id: uuid.UUID | None) -> None:
    if camp_id is not None and db.get(Camp, camp_id) is None:
        raise NotFound("Camp not found")


def _check_staff_role_change(acting_user: ActingUser, before: MemberRole | None, after: MemberRole) -> None:
    if before == after:
        return
    if (before in STAFF_MEMBER_ROLES or after in STAFF_MEMBER_ROLES) and acting_user.role != Role.ADMIN:
        raise ScopeViolation("Only Admin can grant or remove Leader/Shepherd roles")


"""
회원 생성

- data: 스키마에서 검증된 필드 dict (camp_id 포함 가능)
- Leader 는 자신의 캠프로 고정 (다른 캠프 지정 시 ScopeViolation)

"""

def create_member(
    db: Session,
    acting_user: ActingUser,
    data: dict,
    identity: IdentityProvider,
) -> tuple[Member, StaffSyncResult]:
    require_role(acting_user, Role.ADMIN, Role.LEADER)

    data = dict(data)
    if acting_user.role == Role.LEADER:
        if acting_user.camp_id is None:
            raise ScopeViolation("Leader has no camp")
        requested = data.get("camp_id")
        if requested is not None and requested != acting_user.camp_id:
            raise ScopeViolation("Leaders can only add members to their own camp")
        data["camp_id"] = acting_user.camp_id

    role = data.get("role") or MemberRole.MEMBER
    _check_staff_role_change(acting_user, None, role)
    _ensure_email_available(db, data.get("email"))
    _ensure_camp_exists(db, data.get("camp_id"))

    member = Member(**{k: v for k, v in data.items() if v is not None})
    member.role = role
    db.add(member)
    db.flush()

    sync = sync_staff_account(db, member, None, identity)
    return member, sync


"""
회원 수정 (부분 수정)

- data 에 포함된 필드만 반영 (None 은 값 삭제로 간주)
- 역할이 바뀌면 User 계정 동기화

"""

def update_member(
    db: Session,
    acting_user: ActingUser,
    member_id: uuid.UUID,
    data: dict,
    identity: IdentityProvider,
) -> tuple[Member, StaffSyncResult]:
    member = get_member_in_scope(db, acting_user, member_id)
    before_role = member.role

    if "camp_id" in data and data["camp_id"] != member.camp_id:
        if acting_user.role != Role.ADMIN:
            raise ScopeViolation("Only Admin can move members between camps")
        _ensure_camp_exists(db, data["camp_id"])

    if "role" in data and data["role"] is not None:
        _check_staff_role_change(acting_user, before_role, data["role"])

    if "email" in data:
        _ensure_email_available(db, data["email"], member.id)

    for key, value in data.items():
        # 필수 컬럼은 None 으로 덮어쓰지 않음
        if value is None and key in ("first_name", "last_name", "role", "status", "campus", "category"):
            continue
        setattr(member, key, value)
    db.flush()

    if member.role != before_role or member.role in STAFF_MEMBER_ROLES:
        sync = sync_staff_account(db, member, before_role, identity)
    else:
        sync = StaffSyncResult()
    return member, sync


"""
회원 일괄 삭제 (Admin 전용)

- 출석 / 심방 / 배정 행 삭제
- 연결된 Leader/Shepherd 계정 삭제 (Admin 계정은 연결만 해제)
- 캠프 리더로 지정된 경우 leader_id NULL 처리
- 반환: (삭제된 회원 수, 삭제된 User id 목록)

"""

def delete_members(
    db: Session,
    acting_user: ActingUser,
    member_ids: list[uuid.UUID],
) -> tuple[int, list[uuid.UUID]]:
    require_role(acting_user, Role.ADMIN)

    members = db.scalars(select(Member).where(Member.id.in_(member_ids))).all()
    if not members:
        return 0, []
    ids = [m.id for m in members]

    removed_user_ids = []
    for user in db.scalars(select(User).where(User.member_id.in_(ids))).all():
        if user.role == Role.ADMIN:
            user.member_id = None
        else:
            removed_user_ids.append(remove_user(db, user))
    db.flush()

    db.execute(delete(AttendanceRecord).where(AttendanceRecord.member_id.in_(ids)))
    db.execute(delete(FollowUp).where(FollowUp.member_id.in_(ids)))
    db.execute(delete(MemberAssignment).where(MemberAssignment.member_id.in_(ids)))
    db.execute(update(Camp).where(Camp.leader_id.in_(ids)).values(leader_id=None))

    for member in members:
        db.delete(member)
    db.flush()
    return len(members), removed_user_ids
