"""

"관심 필요" 목록 / 알림 해제 테스트.
- 4주(28일) 경계: 28일 전 출석은 최근, 29일 전 출석은 비활동
- 1주 snooze: 6일 전 완료 심방은 숨김, 8일 전은 다시 표시
- 기한 초과 심방 (scheduled_at < now, completed_at 없음)
- 해제: overdue 두 번 해제 시 404, 알 수 없는 type 400, inactive 해제 후 1주 동안 제외

"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from shepherd.core.timeutil import utcnow
from shepherd.models.member import MemberStatus
from shepherd.models.pastoral import FollowUp, FollowUpType, FollowUpOutcome
from shepherd.models.user import Role
from shepherd.services.attention import (
    get_members_needing_attention,
    dismiss_action_item,
    parse_dismiss_target,
    ATTENTION_LIMIT,
)
from shepherd.services.scope import ActingUser
from tests.helpers import (
    headers_for,
    create_camp_in_db,
    create_member_in_db,
    create_user_in_db,
    create_event_in_db,
    mark_present_in_db,
)

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


def _admin(db_session) -> ActingUser:
    return ActingUser.from_user(create_user_in_db(db_session, Role.ADMIN))


def _completed_follow_up(db_session, member, completed_at):
    db_session.add(
        FollowUp(
            member_id=member.id,
            type=FollowUpType.CALL,
            outcome=FollowUpOutcome.REACHED,
            completed_at=completed_at,
        )
    )
    db_session.commit()


def test_attendance_28_days_ago_is_recent(db_session):
    acting = _admin(db_session)
    member = create_member_in_db(db_session)
    event = create_event_in_db(db_session, date=NOW - timedelta(days=28))
    mark_present_in_db(db_session, event, member)

    items = get_members_needing_attention(db_session, acting, now=NOW)
    assert items == []


def test_attendance_29_days_ago_is_inactive(db_session):
    acting = _admin(db_session)
    member = create_member_in_db(db_session, first_name="Ama")
    event = create_event_in_db(db_session, date=NOW - timedelta(days=29))
    mark_present_in_db(db_session, event, member)

    items = get_members_needing_attention(db_session, acting, now=NOW)
    assert len(items) == 1
    item = items[0]
    assert item.type == "inactive"
    assert item.reference_id == member.id
    assert item.reason == "Inactive"
    assert item.days_overdue == 29


def test_never_attended_has_no_days_overdue(db_session):
    acting = _admin(db_session)
    create_member_in_db(db_session)

    items = get_members_needing_attention(db_session, acting, now=NOW)
    assert [i.days_overdue for i in items] == [None]


def test_inactive_members_are_excluded(db_session):
    acting = _admin(db_session)
    create_member_in_db(db_session, status=MemberStatus.INACTIVE)

    assert get_members_needing_attention(db_session, acting, now=NOW) == []


def test_recent_completed_follow_up_snoozes_member(db_session):
    acting = _admin(db_session)
    snoozed = create_member_in_db(db_session, first_name="Snoozed")
    expired = create_member_in_db(db_session, first_name="Expired")
    _completed_follow_up(db_session, snoozed, NOW - timedelta(days=6))
    _completed_follow_up(db_session, expired, NOW - timedelta(days=8))

    items = get_members_needing_attention(db_session, acting, now=NOW)
    assert [i.first_name for i in items] == ["Expired"]


def test_overdue_follow_ups_come_after_inactive(db_session):
    acting = _admin(db_session)
    member = create_member_in_db(db_session, first_name="Kojo")
    event = create_event_in_db(db_session, date=NOW - timedelta(days=3))
    mark_present_in_db(db_session, event, member)

    overdue = FollowUp(member_id=member.id, type=FollowUpType.VISIT, scheduled_at=NOW - timedelta(days=2))
    future = FollowUp(member_id=member.id, type=FollowUpType.VISIT, scheduled_at=NOW + timedelta(days=2))
    db_session.add_all([overdue, future])
    create_member_in_db(db_session, first_name="Never")
    db_session.commit()

    items = get_members_needing_attention(db_session, acting, now=NOW)
    assert [i.type for i in items] == ["inactive", "overdue"]
    assert items[1].reference_id == overdue.id
    assert items[1].reason == "Overdue Follow-up"
    assert items[1].days_overdue == 2


def test_each_list_is_capped(db_session):
    acting = _admin(db_session)
    for i in range(ATTENTION_LIMIT + 2):
        create_member_in_db(db_session, first_name=f"M{i}")

    items = get_members_needing_attention(db_session, acting, now=NOW)
    assert len(items) == ATTENTION_LIMIT


def test_scope_applies_to_attention(db_session):
    camp = create_camp_in_db(db_session, "Camp A")
    other = create_camp_in_db(db_session, "Camp B")
    leader = ActingUser.from_user(create_user_in_db(db_session, Role.LEADER, camp=camp))
    create_member_in_db(db_session, first_name="Mine", camp=camp)
    create_member_in_db(db_session, first_name="Theirs", camp=other)

    items = get_members_needing_attention(db_session, leader, now=NOW)
    assert [i.first_name for i in items] == ["Mine"]


def test_no_token_returns_empty_list(client, db_session):
    create_member_in_db(db_session)

    r = client.get("/attention")
    assert r.status_code == 200, r.text
    assert r.json() == []


def test_dismiss_overdue_twice_is_not_found(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session)
    follow_up = FollowUp(member_id=member.id, type=FollowUpType.CALL, scheduled_at=utcnow() - timedelta(days=1))
    db_session.add(follow_up)
    db_session.commit()
    follow_up_id = follow_up.id

    r = client.get("/attention", headers=headers_for(admin))
    # 한 번도 출석하지 않은 회원이라 inactive 항목도 함께 나옴
    items = r.json()
    assert [i["type"] for i in items] == ["inactive", "overdue"]
    assert items[1]["reference_id"] == str(follow_up_id)

    body = {"type": "overdue", "referenceId": str(follow_up_id)}
    r = client.post("/attention/dismiss", headers=headers_for(admin), json=body)
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Follow-up dismissed"

    r = client.post("/attention/dismiss", headers=headers_for(admin), json=body)
    assert r.status_code == 404, r.text


def test_dismiss_invalid_type(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session)

    r = client.post(
        "/attention/dismiss",
        headers=headers_for(admin),
        json={"type": "birthday", "referenceId": str(member.id)},
    )
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "Invalid type"


def test_dismiss_inactive_snoozes_member(client, db_session):
    admin = create_user_in_db(db_session, Role.ADMIN)
    member = create_member_in_db(db_session)
    member_id = member.id
    admin_id = admin.id

    r = client.get("/attention", headers=headers_for(admin))
    assert [i["reference_id"] for i in r.json()] == [str(member_id)]

    r = client.post(
        "/attention/dismiss",
        headers=headers_for(admin),
        json={"type": "inactive", "referenceId": str(member_id)},
    )
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Alert snoozed for 1 week"

    follow_up = db_session.scalar(select(FollowUp).where(FollowUp.member_id == member_id))
    assert follow_up.user_id == admin_id
    assert follow_up.outcome == FollowUpOutcome.REACHED
    assert follow_up.completed_at is not None

    r = client.get("/attention", headers=headers_for(admin))
    assert r.json() == []


def test_dismiss_requires_login(client, db_session):
    member = create_member_in_db(db_session)

    r = client.post("/attention/dismiss", json={"type": "inactive", "referenceId": str(member.id)})
    assert r.status_code == 401, r.text


def test_dismissed_inactive_member_returns_after_a_week(db_session):
    acting = _admin(db_session)
    member = create_member_in_db(db_session, first_name="Ama")

    dismiss_action_item(db_session, acting, parse_dismiss_target("inactive", member.id), now=NOW)
    db_session.commit()

    assert get_members_needing_attention(db_session, acting, now=NOW) == []
    assert get_members_needing_attention(db_session, acting, now=NOW + timedelta(days=6)) == []

    items = get_members_needing_attention(db_session, acting, now=NOW + timedelta(days=8))
    assert [(i.type, i.reference_id) for i in items] == [("inactive", member.id)]
