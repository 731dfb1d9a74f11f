"""
services/scope.py

회원 데이터 접근 범위(Access Scope) 정책 모음.

이 파일은 "누가 어떤 회원을 조회/수정할 수 있는가"를 한 곳에서 결정한다.
모든 회원 목록 / 상세 / 수정 / 삭제 서비스는 이 파일의 범위 필터를
먼저 적용한 뒤에만 결과를 만들거나 쓰기를 수행한다.

범위 규칙:
- Admin    → 제한 없음 (Unrestricted)
- Leader   → 자신의 camp_id 회원만 (CampScope). camp_id 가 없으면 빈 집합
- Shepherd → MemberAssignment 로 배정된 회원만 (MemberSetScope). 배정이 없으면 빈 집합
- 인증 정보 없음 → 빈 집합 (예외를 던지지 않음)

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 현재 사용자(ActingUser)는 항상 인자로 명시적으로 전달 (전역 조회 X)
- 범위 밖 회원에 대한 쓰기는 조용히 무시하지 않고 ScopeViolation 발생
- "없음(NotFound)"과 "권한 없음(ScopeViolation)"을 구분

관련 파일:
- shepherd.models.user           : User / Role
- shepherd.models.pastoral       : MemberAssignment
- shepherd.core.deps             : 요청에서 ActingUser 생성

"""

import uuid
from dataclasses import dataclass

from sqlalchemy import select, true, false
from sqlalchemy.orm import Session

from shepherd.models.member import Member
from shepherd.models.pastoral import MemberAssignment
from shepherd.models.user import User, Role


class ScopeViolation(PermissionError):
    """범위 밖 회원/리소스에 대한 접근"""


class NotFound(LookupError):
    """대상 레코드가 존재하지 않음"""


@dataclass(frozen=True)
class ActingUser:
    id: uuid.UUID
    role: Role
    camp_id: uuid.UUID | None = None

    @classmethod
    def from_user(cls, user: User) -> "ActingUser":
        return cls(id=user.id, role=user.role, camp_id=user.camp_id)


@dataclass(frozen=True)
class Unrestricted:
    pass


@dataclass(frozen=True)
class CampScope:
    camp_id: uuid.UUID


@dataclass(frozen=True)
class MemberSetScope:
    member_ids: frozenset


ScopeFilter = Unrestricted | CampScope | MemberSetScope

NO_ACCESS = MemberSetScope(frozenset())


def assigned_member_ids(db: Session, shepherd_id: uuid.UUID) -> set[uuid.UUID]:
    return set(
        db.scalars(
            select(MemberAssignment.member_id).where(MemberAssignment.shepherd_id == shepherd_id)
        ).all()
    )


"""
현재 사용자의 회원 접근 범위 계산

- 역할별로 Unrestricted / CampScope / MemberSetScope 중 하나를 반환
- 처리되지 않은 역할은 ValueError (조용히 통과시키지 않음)

"""

def resolve_scope(db: Session, acting_user: ActingUser | None) -> ScopeFilter:
    if acting_user is None:
        return NO_ACCESS

    if acting_user.role == Role.ADMIN:
        return Unrestricted()

    if acting_user.role == Role.LEADER:
        # 캠프 미지정 리더에게 전체 권한을 주지 않음
        if acting_user.camp_id is None:
            return NO_ACCESS
        return CampScope(acting_user.camp_id)

    if acting_user.role == Role.SHEPHERD:
        return MemberSetScope(frozenset(assigned_member_ids(db, acting_user.id)))

    raise ValueError(f"Unhandled role: {acting_user.role}")


def is_empty(scope: ScopeFilter) -> bool:
    return isinstance(scope, MemberSetScope) and not scope.member_ids


# SQL WHERE 절로 변환 (Member 테이블 기준)
def member_condition(scope: ScopeFilter):
    if isinstance(scope, Unrestricted):
        return true()
    if isinstance(scope, CampScope):
        return Member.camp_id == scope.camp_id
    if isinstance(scope, MemberSetScope):
        if not scope.member_ids:
            return false()
        return Member.id.in_(scope.member_ids)
    raise ValueError(f"Unhandled scope: {scope!r}")


def is_in_scope(scope: ScopeFilter, member: Member) -> bool:
    if isinstance(scope, Unrestricted):
        return True
    if isinstance(scope, CampScope):
        return member.camp_id is not None and member.camp_id == scope.camp_id
    if isinstance(scope, MemberSetScope):
        return member.id in scope.member_ids
    raise ValueError(f"Unhandled scope: {scope!r}")


"""
회원 수정 가능 여부 (canEdit)

- Admin 이거나
- Leader 이면서 같은 캠프 회원이거나
- Shepherd 이면서 배정 관계가 존재하는 경우

"""

def can_edit(db: Session, acting_user: ActingUser | None, member: Member) -> bool:
    return is_in_scope(resolve_scope(db, acting_user), member)


"""
범위 검증 후 회원 조회

- 존재하지 않으면 NotFound
- 존재하지만 범위 밖이면 ScopeViolation
- 인증 정보가 없으면 ScopeViolation

"""

def get_member_in_scope(
    db: Session,
    acting_user: ActingUser | None,
    member_id: uuid.UUID,
    scope: ScopeFilter | None = None,
) -> Member:
    member = db.get(Member, member_id)
    if member is None:
        raise NotFound("Member not found")

    if scope is None:
        scope = resolve_scope(db, acting_user)

    if not is_in_scope(scope, member):
        raise ScopeViolation("Member is outside your scope")
    return member


def require_role(acting_user: ActingUser | None, *roles: Role) -> ActingUser:
    if acting_user is None or acting_user.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise ScopeViolation(f"Requires role in ({allowed})")
    return acting_user
