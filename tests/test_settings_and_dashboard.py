"""

설정 / 대시보드 / 관리자 로그 테스트.

"""

from datetime import timedelta

from shepherd.core.timeutil import utcnow
from shepherd.models.member import MemberRole
from shepherd.models.user import Role
from tests.helpers import (
    headers_for,
    create_member_in_db,
    create_user_in_db,
    create_event_in_db,
    mark_present_in_db,
)


def test_settings_defaults_and_save(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    shepherd = create_user_in_db(db_session, Role.SHEPHERD)

    r = client.get("/settings", headers=headers_for(shepherd))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["ministryName"] == "Agape Bible Studies"

    r = client.put("/settings", headers=headers_for(shepherd), json={"values": {"theme": "dark"}})
    assert r.status_code == 403, r.text

    r = client.put("/settings", headers=headers_for(admin), json={"values": {"theme": "dark", "ministryName": "Agape"}})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["theme"] == "dark"
    assert data["ministryName"] == "Agape"
    assert data["birthdayReminders"] == "true"


def test_progress_key_is_reserved(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)

    r = client.put("/settings", headers=headers_for(admin), json={"values": {"sync_progress": "{}"}})
    assert r.status_code == 400, r.text


def test_settings_require_login(client):
    r = client.get("/settings")
    assert r.status_code == 401, r.text


def test_dashboard_without_token_is_empty(client, db_session):
    create_member_in_db(db_session)

    r = client.get("/dashboard")
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["total_members"] == 0
    assert data["attendance_data"] == []


def test_dashboard_stats(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    now = utcnow()
    ama = create_member_in_db(db_session, first_name="Ama", birthday=now.date().replace(year=2000))
    create_member_in_db(db_session, first_name="Esi", role=MemberRole.NEW_CONVERT)
    past = create_event_in_db(db_session, date=now - timedelta(days=2), name="Last Sunday")
    create_event_in_db(db_session, date=now + timedelta(days=5), name="Next Sunday")
    mark_present_in_db(db_session, past, ama)

    r = client.get("/dashboard", headers=headers_for(admin))
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["total_members"] == 2
    assert data["active_members"] == 2
    assert data["new_converts"] == 1
    assert data["birthdays_today"] == 1
    assert [b["first_name"] for b in data["birthdays_this_week"]] == ["Ama"]
    assert [(e["name"], e["present"]) for e in data["attendance_data"]] == [("Last Sunday", 1)]
    assert [e["name"] for e in data["upcoming_events"]] == ["Next Sunday"]


def test_admin_logs_admin_only(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    leader = create_user_in_db(db_session, Role.LEADER)

    r = client.get("/admin/logs", headers=headers_for(leader))
    assert r.status_code == 403, r.text

    r = client.get("/admin/logs", headers=headers_for(admin))
    assert r.status_code == 200, r.text
    assert r.json()["data"] == []
