"""
services/roles.py

회원 역할(Leader / Shepherd) 변경에 따른 로그인 계정(User) 동기화 서비스.

규칙:
- Member → Leader/Shepherd 승격 : 연결된 User 를 생성하거나(없을 때) 갱신
- Leader/Shepherd → 그 외 역할 강등 : 연결된 User 삭제 (외부 identity 삭제는 커밋 후 라우터에서)
- Admin 계정이 연결된 회원은 승격/강등과 무관하게 Admin 유지
- 승격에는 회원 이메일이 필요 (로그인 계정 식별자)

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어(commit)는 라우터에서 수행
- 외래키를 강제하지 않는 DB(SQLite)에서도 정합성이 깨지지 않도록
  User 삭제 전 참조 행을 명시적으로 정리

관련 파일:
- shepherd.services.identity   : 외부 계정 생성/삭제
- shepherd.services.members    : 회원 생성/수정/삭제 시 호출

"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select, delete, update, func
from sqlalchemy.orm import Session

from shepherd.models.admin_log import AdminAction, AdminActionLog
from shepherd.models.event import Event
from shepherd.models.member import Member, MemberRole, STAFF_MEMBER_ROLES
from shepherd.models.pastoral import MemberAssignment, LeaderCampus, FollowUp
from shepherd.models.user import User, Role
from shepherd.services.identity import IdentityProvider

logger = logging.getLogger(__name__)


@dataclass
class StaffSyncResult:
    action: AdminAction | None = None
    user: User | None = None
    removed_user_id: uuid.UUID | None = None


def linked_user(db: Session, member: Member) -> User | None:
    user = db.scalar(select(User).where(User.member_id == member.id))
    if user is None and member.email:
        user = db.scalar(select(User).where(func.lower(User.email) == member.email.lower()))
    return user


"""
User 삭제 함수

- 목자 배정 / 리더 캠퍼스 행 삭제
- 심방 기록, 행사 작성자, 관리 로그의 사용자 참조는 NULL 처리 (기록 보존)

"""

def remove_user(db: Session, user: User) -> uuid.UUID:
    user_id = user.id

    db.execute(delete(MemberAssignment).where(MemberAssignment.shepherd_id == user_id))
    db.execute(delete(LeaderCampus).where(LeaderCampus.leader_id == user_id))
    db.execute(update(FollowUp).where(FollowUp.user_id == user_id).values(user_id=None))
    db.execute(update(Event).where(Event.created_by_id == user_id).values(created_by_id=None))
    db.execute(update(AdminActionLog).where(AdminActionLog.actor_id == user_id).values(actor_id=None))

    db.delete(user)
    db.flush()
    return user_id


"""
역할 변경 후 User 계정 동기화

- before_role : 변경 전 회원 역할 (신규 회원이면 None)
- 반환값의 removed_user_id 가 있으면 커밋 후 외부 identity 삭제 필요

"""

def sync_staff_account(
    db: Session,
    member: Member,
    before_role: MemberRole | None,
    identity: IdentityProvider,
) -> StaffSyncResult:
    was_staff = before_role in STAFF_MEMBER_ROLES
    is_staff = member.role in STAFF_MEMBER_ROLES

    if is_staff:
        if not member.email:
            raise ValueError(f"Member needs an email to become {member.role.value}")

        user = linked_user(db, member)
        if user is None:
            user_id = identity.create_identity(member.email)
            user = User(
                id=user_id,
                email=member.email,
                role=Role(member.role.value),
                member_id=member.id,
                camp_id=member.camp_id,
            )
            db.add(user)
            logger.info("Created %s account %s for member %s", member.role.value, user_id, member.id)
        else:
            if user.role != Role.ADMIN:
                user.role = Role(member.role.value)
            user.member_id = member.id
            user.camp_id = member.camp_id
            user.email = member.email
        db.flush()

        action = AdminAction.PROMOTE_MEMBER if before_role != member.role else None
        return StaffSyncResult(action=action, user=user)

    if was_staff:
        user = db.scalar(select(User).where(User.member_id == member.id))
        if user is None:
            return StaffSyncResult(action=AdminAction.DEMOTE_MEMBER)

        if user.role == Role.ADMIN:
            return StaffSyncResult(action=AdminAction.DEMOTE_MEMBER, user=user)

        removed_id = remove_user(db, user)
        logger.info("Removed account %s after demoting member %s", removed_id, member.id)
        return StaffSyncResult(action=AdminAction.DEMOTE_MEMBER, removed_user_id=removed_id)

    return StaffSyncResult()
