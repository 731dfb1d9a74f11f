"""

회원 명부 API 통합 테스트.
- 범위 적용 목록 (비로그인 → 빈 목록, Leader → 자신의 캠프)
- 범위 밖 회원 403 / 없는 회원 404
- Leader 회원 생성 시 캠프 고정, Shepherd 생성 불가
- Leader/Shepherd 승격·강등 시 User 계정 생성·삭제와 관리자 로그
- 일괄 삭제는 Admin 전용

"""

import uuid

from sqlalchemy import select

from shepherd.models.admin_log import AdminActionLog, AdminAction
from shepherd.models.member import Member, MemberRole
from shepherd.models.pastoral import FollowUp, FollowUpType
from shepherd.models.user import User, Role
from tests.helpers import (
    headers_for,
    create_camp_in_db,
    create_member_in_db,
    create_user_in_db,
    assign_in_db,
)


def test_list_without_token_is_empty(client, db_session):
    create_member_in_db(db_session)

    r = client.get("/members")
    assert r.status_code == 200, r.text
    assert r.json()["data"] == []


def test_leader_lists_only_own_camp(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    mine = create_member_in_db(db_session, first_name="Ama", camp=camp)
    create_member_in_db(db_session, first_name="Yaw", camp=other)

    r = client.get("/members", headers=headers_for(leader))
    assert r.status_code == 200, r.text
    rows = r.json()["data"]
    assert [row["id"] for row in rows] == [str(mine.id)]
    assert rows[0]["can_edit"] is True
    assert rows[0]["camp_name"] == "Camp A"


def test_shepherd_lists_assigned_members(client, db_session):
    shepherd = create_user_in_db(db_session, Role.SHEPHERD)
    assigned = create_member_in_db(db_session, first_name="Esi")
    create_member_in_db(db_session, first_name="Kojo")
    assign_in_db(db_session, shepherd, assigned)

    r = client.get("/members", headers=headers_for(shepherd))
    assert r.status_code == 200, r.text
    assert [row["first_name"] for row in r.json()["data"]] == ["Esi"]


def test_detail_distinguishes_forbidden_and_missing(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    theirs = create_member_in_db(db_session, camp=other)

    r = client.get(f"/members/{theirs.id}", headers=headers_for(leader))
    assert r.status_code == 403, r.text

    r = client.get(f"/members/{uuid.uuid4()}", headers=headers_for(leader))
    assert r.status_code == 404, r.text


def test_update_out_of_scope_member_is_rejected(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    theirs = create_member_in_db(db_session, first_name="Yaw", camp=other)

    r = client.patch(f"/members/{theirs.id}", headers=headers_for(leader), json={"first_name": "Changed"})
    assert r.status_code == 403, r.text

    db_session.refresh(theirs)
    assert theirs.first_name == "Yaw"


def test_leader_creates_member_in_own_camp(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)

    r = client.post(
        "/members",
        headers=headers_for(leader),
        json={"first_name": "Akua", "last_name": "Boateng", "phone": "0551234567"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["data"]["camp_id"] == str(camp.id)

    r = client.post(
        "/members",
        headers=headers_for(leader),
        json={"first_name": "Kofi", "last_name": "Owusu", "camp_id": str(other.id)},
    )
    assert r.status_code == 403, r.text


def test_shepherd_cannot_create_member(client, db_session):
    shepherd = create_user_in_db(db_session, Role.SHEPHERD)

    r = client.post("/members", headers=headers_for(shepherd), json={"first_name": "A", "last_name": "B"})
    assert r.status_code == 403, r.text


def test_duplicate_email_is_rejected(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    create_member_in_db(db_session, email="ama@test.com")

    r = client.post(
        "/members",
        headers=headers_for(admin),
        json={"first_name": "Ama", "last_name": "Two", "email": "ama@test.com"},
    )
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "Email already in use"


def test_promote_and_demote_syncs_user_account(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session, first_name="Esi", camp=camp, email="esi@test.com")
    member_id = member.id

    r = client.patch(f"/members/{member_id}", headers=headers_for(admin), json={"role": "Shepherd"})
    assert r.status_code == 200, r.text

    user = db_session.scalar(select(User).where(User.member_id == member_id))
    assert user is not None
    assert user.role == Role.SHEPHERD
    assert user.email == "esi@test.com"
    assert user.camp_id == camp.id
    user_id = user.id

    # 승격된 목자가 남긴 심방 기록은 강등 후에도 남아야 함
    db_session.add(FollowUp(member_id=member_id, user_id=user_id, type=FollowUpType.CALL))
    db_session.commit()

    r = client.patch(f"/members/{member_id}", headers=headers_for(admin), json={"role": "Member"})
    assert r.status_code == 200, r.text

    db_session.expire_all()
    assert db_session.get(User, user_id) is None
    follow_up = db_session.scalar(select(FollowUp).where(FollowUp.member_id == member_id))
    assert follow_up.user_id is None

    actions = db_session.scalars(
        select(AdminActionLog.action).where(AdminActionLog.target_member_id == member_id)
    ).all()
    assert sorted(a.value for a in actions) == [AdminAction.DEMOTE_MEMBER.value, AdminAction.PROMOTE_MEMBER.value]


def test_promotion_requires_email(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session)

    r = client.patch(f"/members/{member.id}", headers=headers_for(admin), json={"role": "Leader"})
    assert r.status_code == 400, r.text

    db_session.refresh(member)
    assert member.role == MemberRole.MEMBER


def test_leader_cannot_grant_staff_role(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    member = create_member_in_db(db_session, camp=camp, email="kojo@test.com")

    r = client.patch(f"/members/{member.id}", headers=headers_for(leader), json={"role": "Shepherd"})
    assert r.status_code == 403, r.text


def test_delete_members_is_admin_only(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session, camp=camp)
    member_id = member.id

    r = client.post("/members/delete", headers=headers_for(leader), json={"ids": [str(member_id)]})
    assert r.status_code == 403, r.text

    r = client.post("/members/delete", headers=headers_for(admin), json={"ids": [str(member_id)]})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["deleted"] == 1

    db_session.expire_all()
    assert db_session.get(Member, member_id) is None


def test_campus_stats_are_scoped(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    create_member_in_db(db_session, first_name="A")
    create_member_in_db(db_session, first_name="B")

    r = client.get("/members/stats", headers=headers_for(admin))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["CoHK"] == 2

    r = client.get("/members/stats")
    assert r.json()["data"]["CoHK"] == 0
