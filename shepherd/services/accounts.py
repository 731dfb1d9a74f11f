"""
services/accounts.py

로그인 계정(User) 관리 서비스 (Admin 전용).

주요 기능:
- 전체 계정 목록 (연결된 회원 / 캠프 이름 포함)
- 계정 직접 생성 (외부 identity 생성 후 User 행 추가)

규칙:
- 이메일은 계정 간 중복 불가 (대소문자 무시)
- member_id 를 주면 그 회원에 이미 연결된 계정이 없어야 함
- Leader/Shepherd 계정을 회원에 연결하면 회원 역할도 같은 역할로 맞춤
- camp_id 가 없으면 연결된 회원의 캠프를 사용

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어(commit)는 라우터에서 수행

"""

import uuid
from dataclasses import dataclass

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from shepherd.models.camp import Camp
from shepherd.models.member import Member, MemberRole
from shepherd.models.user import User, Role
from shepherd.services.identity import IdentityProvider
from shepherd.services.scope import ActingUser, NotFound, require_role


@dataclass
class AccountCreated:
    user: User
    member: Member | None = None
    before_role: MemberRole | None = None


def list_users(db: Session, acting_user: ActingUser) -> list[tuple[User, Member | None, str | None]]:
    require_role(acting_user, Role.ADMIN)

    rows = db.execute(
        select(User, Member, Camp.name)
        .outerjoin(Member, Member.id == User.member_id)
        .outerjoin(Camp, Camp.id == User.camp_id)
        .order_by(User.created_at, User.email)
    ).all()
    return [(user, member, camp_name) for user, member, camp_name in rows]


"""
계정 생성

- identity 생성 실패는 IdentityProviderError (라우터에서 502)
- 반환값의 member / before_role 로 라우터에서 승격 로그 기록

"""

def create_user_account(
    db: Session,
    acting_user: ActingUser,
    identity: IdentityProvider,
    *,
    email: str,
    role: Role,
    password: str | None = None,
    member_id: uuid.UUID | None = None,
    camp_id: uuid.UUID | None = None,
) -> AccountCreated:
    require_role(acting_user, Role.ADMIN)

    if db.scalar(select(User.id).where(func.lower(User.email) == email.lower())) is not None:
        raise ValueError("Email already registered")

    member = None
    before_role = None
    if member_id is not None:
        member = db.get(Member, member_id)
        if member is None:
            raise NotFound("Member not found")
        if db.scalar(select(User.id).where(User.member_id == member.id)) is not None:
            raise ValueError("Member already has an account")
        before_role = member.role
        if camp_id is None:
            camp_id = member.camp_id

    if camp_id is not None and db.get(Camp, camp_id) is None:
        raise NotFound("Camp not found")

    user_id = identity.create_identity(email, password)
    user = User(
        id=user_id,
        email=email,
        role=role,
        member_id=member.id if member else None,
        camp_id=camp_id,
    )
    db.add(user)

    if member is not None and role != Role.ADMIN:
        member.role = MemberRole(role.value)
    db.flush()
    return AccountCreated(user=user, member=member, before_role=before_role)
