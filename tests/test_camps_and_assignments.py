"""

캠프 / 목자 배정 API 테스트.
- 캠프 생성·삭제는 Admin 전용, 회원이 남은 캠프는 삭제 불가
- Leader 는 자신의 캠프만 조회 (다른 캠프 403)
- 목자 배정: 기존 목자 교체, 범위 밖 회원 포함 시 전체 거부
- 리더 캠퍼스 전체 교체
- 배정 가능 회원: 아직 목자가 없는 범위 안 회원만

"""

from sqlalchemy import select

from shepherd.models.camp import Camp
from shepherd.models.pastoral import MemberAssignment
from shepherd.models.user import Role
from tests.helpers import (
    headers_for,
    create_camp_in_db,
    create_member_in_db,
    create_user_in_db,
    assign_in_db,
)


def test_create_camp_admin_only(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    shepherd = create_user_in_db(db_session, Role.SHEPHERD)

    r = client.post("/camps", headers=headers_for(shepherd), json={"name": "Camp 9"})
    assert r.status_code == 403, r.text

    r = client.post("/camps", headers=headers_for(admin), json={"name": "Camp 9"})
    assert r.status_code == 201, r.text
    assert r.json()["data"]["name"] == "Camp 9"

    # 이름 중복은 대소문자 무시
    r = client.post("/camps", headers=headers_for(admin), json={"name": "camp 9"})
    assert r.status_code == 400, r.text


def test_camp_with_members_cannot_be_deleted(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    camp = create_camp_in_db(db_session, "Camp A")
    empty = create_camp_in_db(db_session, "Camp B")
    create_member_in_db(db_session, camp=camp)
    empty_id = empty.id

    r = client.delete(f"/camps/{camp.id}", headers=headers_for(admin))
    assert r.status_code == 400, r.text

    r = client.delete(f"/camps/{empty_id}", headers=headers_for(admin))
    assert r.status_code == 200, r.text
    db_session.expire_all()
    assert db_session.get(Camp, empty_id) is None


def test_leader_sees_only_own_camp(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    create_member_in_db(db_session, camp=camp)

    r = client.get("/camps", headers=headers_for(leader))
    assert r.status_code == 200, r.text
    assert [(c["name"], c["member_count"]) for c in r.json()["data"]] == [("Camp A", 1)]

    r = client.get(f"/camps/{camp.id}", headers=headers_for(leader))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["stats"]["total_members"] == 1

    r = client.get(f"/camps/{other.id}/dashboard", headers=headers_for(leader))
    assert r.status_code == 403, r.text


def test_assign_replaces_previous_shepherd(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    first = create_user_in_db(db_session, Role.SHEPHERD)
    second = create_user_in_db(db_session, Role.SHEPHERD)
    member = create_member_in_db(db_session)
    assign_in_db(db_session, first, member)
    member_id = member.id
    second_id = second.id

    r = client.post(
        f"/shepherds/{second_id}/members",
        headers=headers_for(admin),
        json={"member_ids": [str(member_id), str(member_id)]},
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["assigned"] == 1

    assignments = db_session.scalars(select(MemberAssignment).where(MemberAssignment.member_id == member_id)).all()
    assert [a.shepherd_id for a in assignments] == [second_id]

    r = client.get(f"/shepherds/{second_id}/members", headers=headers_for(second))
    assert [m["id"] for m in r.json()["data"]] == [str(member_id)]

    r = client.get(f"/shepherds/{second_id}/members", headers=headers_for(first))
    assert r.status_code == 403, r.text


def test_leader_cannot_assign_other_camp_member(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    shepherd = create_user_in_db(db_session, Role.SHEPHERD, camp=camp)
    mine = create_member_in_db(db_session, camp=camp)
    theirs = create_member_in_db(db_session, camp=other)

    r = client.post(
        f"/shepherds/{shepherd.id}/members",
        headers=headers_for(leader),
        json={"member_ids": [str(mine.id), str(theirs.id)]},
    )
    assert r.status_code == 403, r.text
    assert db_session.scalars(select(MemberAssignment)).all() == []


def test_unassign(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    shepherd = create_user_in_db(db_session, Role.SHEPHERD)
    member = create_member_in_db(db_session)
    assign_in_db(db_session, shepherd, member)
    url = f"/shepherds/{shepherd.id}/members/{member.id}"

    r = client.delete(url, headers=headers_for(admin))
    assert r.status_code == 200, r.text

    r = client.delete(url, headers=headers_for(admin))
    assert r.status_code == 404, r.text


def test_staff_lists_are_camp_bound_for_leaders(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    mine = create_user_in_db(db_session, Role.SHEPHERD, camp=camp)
    create_user_in_db(db_session, Role.SHEPHERD, camp=other)

    r = client.get("/shepherds", headers=headers_for(leader))
    assert r.status_code == 200, r.text
    assert [s["id"] for s in r.json()["data"]] == [str(mine.id)]

    r = client.get("/shepherds", headers=headers_for(mine))
    assert r.status_code == 403, r.text


def test_replace_leader_campuses(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    leader = create_user_in_db(db_session, Role.LEADER)
    url = f"/leaders/{leader.id}/campuses"

    r = client.put(url, headers=headers_for(admin), json={"campuses": ["KNUST", "Legon", "KNUST"]})
    assert r.status_code == 200, r.text
    assert r.json()["data"] == ["KNUST", "Legon"]

    r = client.put(url, headers=headers_for(admin), json={"campuses": ["CoHK"]})
    assert r.status_code == 200, r.text

    r = client.get(url, headers=headers_for(admin))
    assert r.json()["data"] == ["CoHK"]

    r = client.get(url, headers=headers_for(leader))
    assert r.status_code == 403, r.text


def test_available_members_excludes_assigned(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    admin = create_user_in_db(db_session, Role.ADMIN)
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    shepherd = create_user_in_db(db_session, Role.SHEPHERD, camp=camp)
    assigned = create_member_in_db(db_session, first_name="Ama", camp=camp)
    create_member_in_db(db_session, first_name="Kofi", camp=camp)
    create_member_in_db(db_session, first_name="Esi", camp=other)
    assign_in_db(db_session, shepherd, assigned)

    r = client.get("/assignments/available-members", headers=headers_for(admin))
    assert r.status_code == 200, r.text
    assert [(m["first_name"], m["camp_name"]) for m in r.json()["data"]] == [("Esi", "Camp B"), ("Kofi", "Camp A")]

    r = client.get("/assignments/available-members", headers=headers_for(leader))
    assert [m["first_name"] for m in r.json()["data"]] == ["Kofi"]

    r = client.get("/assignments/available-members", headers=headers_for(shepherd))
    assert r.status_code == 403, r.text
