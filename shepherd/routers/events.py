"""
events.py

행사(Event) 및 출석 체크 API 모음.

주요 기능:
- 행사 목록 (범위 안 회원 기준 출석 집계 포함)
- 행사 생성 / 삭제
- 행사별 출석 명단 조회
- 출석 체크 (단건 / 일괄)

설계 원칙:
- Admin 이 만든 행사는 전체 행사, 그 외 사용자가 만든 행사는 자신의 캠프 행사
- 출석 체크는 범위 안의 회원만 가능 (범위 밖 회원이 섞이면 전체 거부)
- 출석 기록은 (회원, 행사) 당 1건 upsert

관련 파일:
- shepherd.services.attendance  : 행사 / 출석 비즈니스 로직
- shepherd.schemas.event        : 요청/응답 스키마

"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_acting_user
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.schemas.event import EventCreate, EventResponse, AttendanceMark, BulkAttendanceRequest
from shepherd.services.attendance import (
    EventCounts,
    list_events,
    create_event,
    delete_event,
    get_event_attendance,
    mark_attendance,
    bulk_mark_attendance,
)
from shepherd.services.scope import ActingUser

router = APIRouter(prefix="/events", tags=["events"])


def event_data(event, counts: EventCounts | None = None) -> dict:
    data = EventResponse.model_validate(event).model_dump(mode="json")
    if counts is not None:
        data["attendance"] = {
            "present": counts.present,
            "absent": counts.absent,
            "excused": counts.excused,
            "total": counts.total,
        }
    return data


@router.get("")
def events_list(
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    return {"data": [event_data(event, counts) for event, counts in list_events(db, acting_user)]}


@router.post("", status_code=201)
def event_create(
    data: EventCreate,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        event = create_event(db, acting_user, **data.model_dump())
        db.commit()
        db.refresh(event)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Event created", "data": event_data(event)}


@router.delete("/{event_id}")
def event_delete(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        delete_event(db, acting_user, event_id)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Event deleted", "data": {"id": str(event_id)}}


"""
행사 출석 명단 API

- 범위 안의 Active 회원 전체와 출석 상태 (기록이 없으면 status=None)

"""
@router.get("/{event_id}/attendance")
def event_attendance(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        event, rows = get_event_attendance(db, acting_user, event_id)
    except SERVICE_ERRORS as e:
        raise http_error(e)

    return {
        "data": {
            "event": event_data(event),
            "members": [
                {
                    "member_id": str(member.id),
                    "first_name": member.first_name,
                    "last_name": member.last_name,
                    "status": record.status.value if record else None,
                    "notes": record.notes if record else None,
                    "can_edit": can_edit,
                }
                for member, record, can_edit in rows
            ],
        }
    }


@router.post("/{event_id}/attendance")
def event_mark_attendance(
    event_id: uuid.UUID,
    data: AttendanceMark,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        record = mark_attendance(db, acting_user, event_id, data.member_id, data.status, data.notes)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {
        "message": "Attendance saved",
        "data": {"member_id": str(record.member_id), "event_id": str(record.event_id), "status": record.status.value},
    }


@router.post("/{event_id}/attendance/bulk")
def event_bulk_attendance(
    event_id: uuid.UUID,
    data: BulkAttendanceRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    entries = [(r.member_id, r.status) for r in data.records]
    try:
        saved = bulk_mark_attendance(db, acting_user, event_id, entries)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": f"Saved attendance for {saved} member(s)", "data": {"saved": saved}}
