"""

회원 접근 범위(scope) 정책 단위 테스트.
- 역할별 범위 (Admin 전체 / Leader 캠프 / Shepherd 배정 회원)
- 캠프 없는 Leader, 배정 없는 Shepherd, 인증 정보 없음 → 빈 범위
- 없는 회원(NotFound)과 범위 밖 회원(ScopeViolation) 구분

"""

import uuid

import pytest

from shepherd.models.user import Role
from shepherd.services.scope import (
    ActingUser,
    Unrestricted,
    CampScope,
    MemberSetScope,
    NotFound,
    ScopeViolation,
    resolve_scope,
    is_empty,
    can_edit,
    get_member_in_scope,
)
from tests.helpers import create_camp_in_db, create_member_in_db, create_user_in_db, assign_in_db


def test_admin_is_unrestricted(db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    scope = resolve_scope(db_session, ActingUser.from_user(admin))
    assert isinstance(scope, Unrestricted)


def test_leader_is_limited_to_own_camp(db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    mine = create_member_in_db(db_session, first_name="Ama", camp=camp)
    theirs = create_member_in_db(db_session, first_name="Yaw", camp=other)

    acting = ActingUser.from_user(leader)
    scope = resolve_scope(db_session, acting)
    assert scope == CampScope(camp.id)
    assert can_edit(db_session, acting, mine) is True
    assert can_edit(db_session, acting, theirs) is False


def test_leader_without_camp_sees_nothing(db_session):
    leader = create_user_in_db(db_session, Role.LEADER)
    create_member_in_db(db_session)

    scope = resolve_scope(db_session, ActingUser.from_user(leader))
    assert is_empty(scope)


def test_shepherd_scope_is_assigned_members(db_session):
    shepherd = create_user_in_db(db_session, Role.SHEPHERD)
    assigned = create_member_in_db(db_session, first_name="Esi")
    create_member_in_db(db_session, first_name="Kojo")
    assign_in_db(db_session, shepherd, assigned)

    scope = resolve_scope(db_session, ActingUser.from_user(shepherd))
    assert scope == MemberSetScope(frozenset({assigned.id}))


def test_shepherd_without_assignments_sees_nothing(db_session):
    shepherd = create_user_in_db(db_session, Role.SHEPHERD)
    assert is_empty(resolve_scope(db_session, ActingUser.from_user(shepherd)))


def test_no_acting_user_is_empty_scope(db_session):
    create_member_in_db(db_session)
    assert is_empty(resolve_scope(db_session, None))


def test_missing_member_is_not_found(db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    with pytest.raises(NotFound):
        get_member_in_scope(db_session, ActingUser.from_user(admin), uuid.uuid4())


def test_out_of_scope_member_is_scope_violation(db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    theirs = create_member_in_db(db_session, camp=other)

    with pytest.raises(ScopeViolation):
        get_member_in_scope(db_session, ActingUser.from_user(leader), theirs.id)
