"""

행사 / 출석 체크 통합 테스트.
- Admin 행사는 전체 행사, Leader 행사는 자신의 캠프 행사
- 다른 캠프 행사는 목록에서 제외되고 조회 시 403
- 출석 체크 upsert (같은 회원 두 번 체크해도 1건)
- 일괄 체크에 범위 밖 회원이 있으면 전체 거부
- 행사 목록 집계는 범위 안 회원만

"""

from datetime import timedelta

from sqlalchemy import select, func

from shepherd.core.timeutil import utcnow
from shepherd.models.event import Event, AttendanceRecord, AttendanceStatus
from shepherd.models.user import Role
from tests.helpers import (
    headers_for,
    create_camp_in_db,
    create_member_in_db,
    create_user_in_db,
    create_event_in_db,
)


def _event_body(name="Bible Study", **extra):
    return {"name": name, "date": (utcnow() + timedelta(days=1)).isoformat(), "type": "Meeting", **extra}


def test_admin_event_is_global_and_leader_event_is_camp(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    admin = create_user_in_db(db_session, Role.ADMIN)
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)

    r = client.post("/events", headers=headers_for(admin), json=_event_body("Service"))
    assert r.status_code == 201, r.text
    assert r.json()["data"]["camp_id"] is None

    # Leader 가 다른 camp_id 를 보내도 자신의 캠프로 고정
    r = client.post("/events", headers=headers_for(leader), json=_event_body("Camp Meeting", camp_id=str(other.id)))
    assert r.status_code == 201, r.text
    assert r.json()["data"]["camp_id"] == str(camp.id)


def test_other_camp_events_are_hidden(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    create_event_in_db(db_session, date=utcnow(), name="Global")
    create_event_in_db(db_session, date=utcnow(), name="Mine", camp=camp)
    theirs = create_event_in_db(db_session, date=utcnow(), name="Theirs", camp=other)

    r = client.get("/events", headers=headers_for(leader))
    assert r.status_code == 200, r.text
    assert sorted(e["name"] for e in r.json()["data"]) == ["Global", "Mine"]

    r = client.get(f"/events/{theirs.id}/attendance", headers=headers_for(leader))
    assert r.status_code == 403, r.text


def test_mark_attendance_upserts(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session)
    event = create_event_in_db(db_session, date=utcnow())
    url = f"/events/{event.id}/attendance"

    r = client.post(url, headers=headers_for(admin), json={"member_id": str(member.id), "status": "Present"})
    assert r.status_code == 200, r.text
    r = client.post(url, headers=headers_for(admin), json={"member_id": str(member.id), "status": "Excused"})
    assert r.status_code == 200, r.text

    records = db_session.scalars(select(AttendanceRecord).where(AttendanceRecord.event_id == event.id)).all()
    assert len(records) == 1
    assert records[0].status == AttendanceStatus.EXCUSED

    r = client.get(url, headers=headers_for(admin))
    rows = r.json()["data"]["members"]
    assert rows == [
        {
            "member_id": str(member.id),
            "first_name": member.first_name,
            "last_name": member.last_name,
            "status": "Excused",
            "notes": None,
            "can_edit": True,
        }
    ]


def test_bulk_attendance_rejects_out_of_scope_member(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    mine = create_member_in_db(db_session, first_name="Mine", camp=camp)
    theirs = create_member_in_db(db_session, first_name="Theirs", camp=other)
    event = create_event_in_db(db_session, date=utcnow(), camp=camp)
    event_id = event.id

    r = client.post(
        f"/events/{event_id}/attendance/bulk",
        headers=headers_for(leader),
        json={
            "records": [
                {"member_id": str(mine.id), "status": "Present"},
                {"member_id": str(theirs.id), "status": "Present"},
            ]
        },
    )
    assert r.status_code == 403, r.text
    count = db_session.scalar(
        select(func.count()).select_from(AttendanceRecord).where(AttendanceRecord.event_id == event_id)
    )
    assert count == 0


def test_bulk_attendance_last_entry_wins(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session)
    event = create_event_in_db(db_session, date=utcnow())

    r = client.post(
        f"/events/{event.id}/attendance/bulk",
        headers=headers_for(admin),
        json={
            "records": [
                {"member_id": str(member.id), "status": "Present"},
                {"member_id": str(member.id), "status": "Absent"},
            ]
        },
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["saved"] == 1

    record = db_session.scalar(select(AttendanceRecord).where(AttendanceRecord.member_id == member.id))
    assert record.status == AttendanceStatus.ABSENT


def test_event_counts_only_include_scoped_members(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    mine = create_member_in_db(db_session, camp=camp)
    theirs = create_member_in_db(db_session, camp=other)
    event = create_event_in_db(db_session, date=utcnow(), name="Global")
    db_session.add_all(
        [
            AttendanceRecord(event_id=event.id, member_id=mine.id, status=AttendanceStatus.PRESENT),
            AttendanceRecord(event_id=event.id, member_id=theirs.id, status=AttendanceStatus.PRESENT),
        ]
    )
    db_session.commit()

    r = client.get("/events", headers=headers_for(leader))
    attendance = r.json()["data"][0]["attendance"]
    assert attendance["present"] == 1
    assert attendance["total"] == 1


def test_delete_event_removes_attendance(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session)
    event = create_event_in_db(db_session, date=utcnow())
    event_id = event.id
    db_session.add(AttendanceRecord(event_id=event_id, member_id=member.id, status=AttendanceStatus.PRESENT))
    db_session.commit()

    r = client.delete(f"/events/{event_id}", headers=headers_for(admin))
    assert r.status_code == 200, r.text

    db_session.expire_all()
    assert db_session.get(Event, event_id) is None
    assert db_session.scalar(select(func.count()).select_from(AttendanceRecord)) == 0


def test_leader_cannot_delete_global_event(client, db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    leader = create_user_in_db(db_session, Role.LEADER, camp=camp)
    event = create_event_in_db(db_session, date=utcnow(), name="Global")

    r = client.delete(f"/events/{event.id}", headers=headers_for(leader))
    assert r.status_code == 403, r.text
