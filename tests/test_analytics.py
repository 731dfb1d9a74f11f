"""

출석 분석 테스트.
- 최근 12주 Present 기록만 집계 (13주 전 행사, Absent 기록 제외)
- 캠프별 합계 / 출석 상위 회원 / 최다 출석 목자
- Leader 는 자신의 캠프 회원과 볼 수 있는 행사만 집계
- 비로그인 → 빈 결과

"""

from datetime import datetime, timedelta, timezone

from shepherd.models.event import AttendanceRecord, AttendanceStatus
from shepherd.models.user import Role
from shepherd.services.analytics import get_attendance_analytics
from shepherd.services.scope import ActingUser
from tests.helpers import (
    headers_for,
    assign_in_db,
    create_camp_in_db,
    create_member_in_db,
    create_user_in_db,
    create_event_in_db,
    mark_present_in_db,
)

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


def _seed(db_session):
    camp_a = create_camp_in_db(db_session, "Camp A")
    camp_b = create_camp_in_db(db_session, "Camp B")
    ama = create_member_in_db(db_session, first_name="Ama", camp=camp_a)
    kofi = create_member_in_db(db_session, first_name="Kofi", camp=camp_a)
    esi = create_member_in_db(db_session, first_name="Esi", camp=camp_b)
    profile = create_member_in_db(db_session, first_name="Yaw", last_name="Boateng", camp=camp_a)
    shepherd = create_user_in_db(db_session, Role.SHEPHERD, camp=camp_a, member=profile)
    assign_in_db(db_session, shepherd, ama, kofi)

    old = create_event_in_db(db_session, date=NOW - timedelta(weeks=13), name="Old Service")
    first = create_event_in_db(db_session, date=NOW - timedelta(days=14), name="Service 1")
    second = create_event_in_db(db_session, date=NOW - timedelta(days=7), name="Service 2")
    camp_b_meeting = create_event_in_db(db_session, date=NOW - timedelta(days=3), name="Camp B Meeting", camp=camp_b)

    mark_present_in_db(db_session, old, ama)
    mark_present_in_db(db_session, first, ama)
    mark_present_in_db(db_session, first, kofi)
    mark_present_in_db(db_session, first, esi)
    mark_present_in_db(db_session, second, ama)
    mark_present_in_db(db_session, camp_b_meeting, esi)
    db_session.add(AttendanceRecord(event_id=second.id, member_id=kofi.id, status=AttendanceStatus.ABSENT))
    db_session.commit()
    return camp_a, shepherd


def test_admin_analytics(db_session):
    _, shepherd = _seed(db_session)
    admin = ActingUser.from_user(create_user_in_db(db_session, Role.ADMIN))

    data = get_attendance_analytics(db_session, admin, now=NOW)

    assert [(t["name"], t["count"]) for t in data["trends"]] == [
        ("Service 1", 3),
        ("Service 2", 1),
        ("Camp B Meeting", 1),
    ]
    assert data["trends"][0]["label"] == "Oct 02"
    assert [(c["name"], c["attendance_count"]) for c in data["camp_stats"]] == [("Camp A", 3), ("Camp B", 2)]
    assert [(m["first_name"], m["attendance_count"]) for m in data["top_attendees"]] == [
        ("Ama", 2),
        ("Esi", 2),
        ("Kofi", 1),
    ]
    assert data["top_shepherd"] == {
        "id": str(shepherd.id),
        "email": shepherd.email,
        "name": "Yaw Boateng",
        "attendance_count": 3,
    }


def test_leader_analytics_is_scoped_to_camp(db_session):
    camp_a, _ = _seed(db_session)
    leader = ActingUser.from_user(create_user_in_db(db_session, Role.LEADER, camp=camp_a))

    data = get_attendance_analytics(db_session, leader, now=NOW)

    assert [(t["name"], t["count"]) for t in data["trends"]] == [("Service 1", 2), ("Service 2", 1)]
    assert [(c["name"], c["attendance_count"]) for c in data["camp_stats"]] == [("Camp A", 3)]
    assert [(m["first_name"], m["attendance_count"]) for m in data["top_attendees"]] == [("Ama", 2), ("Kofi", 1)]


def test_analytics_without_attendance(db_session):
    admin = ActingUser.from_user(create_user_in_db(db_session, Role.ADMIN))

    data = get_attendance_analytics(db_session, admin, now=NOW)
    assert data == {"trends": [], "camp_stats": [], "top_attendees": [], "top_shepherd": None}


def test_analytics_api(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session)
    event = create_event_in_db(db_session, date=datetime.now(timezone.utc) - timedelta(days=1))
    mark_present_in_db(db_session, event, member)

    r = client.get("/dashboard/analytics")
    assert r.status_code == 200, r.text
    assert r.json()["data"]["trends"] == []

    r = client.get("/dashboard/analytics", headers=headers_for(admin))
    assert r.status_code == 200, r.text
    assert [t["count"] for t in r.json()["data"]["trends"]] == [1]
