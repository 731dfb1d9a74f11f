"""
follow_ups.py

심방/연락(FollowUp) API 모음.

주요 기능:
- 회원별 심방 기록 생성 / 이력 조회
- 예약 연락 완료 처리 / 삭제
- 전체 심방 목록 (필터 + 페이지네이션) 및 통계

설계 원칙:
- 대상 회원이 범위 밖이면 403, 없으면 404
- 목록/통계는 로그인하지 않았으면 빈 결과

관련 파일:
- shepherd.services.follow_ups   : 심방 비즈니스 로직
- shepherd.schemas.follow_up     : 요청/응답 스키마

"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_acting_user, get_optional_acting_user
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.models.pastoral import FollowUpType, FollowUpOutcome
from shepherd.schemas.follow_up import FollowUpCreate, FollowUpComplete, FollowUpResponse
from shepherd.services.follow_ups import (
    create_follow_up,
    complete_follow_up,
    delete_follow_up,
    member_follow_ups,
    list_follow_ups,
    total_pages,
    follow_up_stats,
)
from shepherd.services.scope import ActingUser

router = APIRouter(tags=["follow-ups"])


def follow_up_data(follow_up) -> dict:
    return FollowUpResponse.model_validate(follow_up).model_dump(mode="json")


@router.get("/members/{member_id}/follow-ups")
def member_follow_up_history(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        follow_ups = member_follow_ups(db, acting_user, member_id)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return {"data": [follow_up_data(f) for f in follow_ups]}


@router.post("/members/{member_id}/follow-ups", status_code=201)
def member_follow_up_create(
    member_id: uuid.UUID,
    data: FollowUpCreate,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        follow_up = create_follow_up(db, acting_user, member_id, **data.model_dump())
        db.commit()
        db.refresh(follow_up)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Follow-up recorded", "data": follow_up_data(follow_up)}


"""
전체 심방 목록 API

- page / limit 페이지네이션
- type / outcome / user_id / search / start_date / end_date 필터
- meta: total, page, limit, total_pages

"""
@router.get("/follow-ups")
def follow_ups_list(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    type: FollowUpType | None = None,
    outcome: FollowUpOutcome | None = None,
    user_id: uuid.UUID | None = None,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    rows, total = list_follow_ups(
        db,
        acting_user,
        page=page,
        limit=limit,
        type=type,
        outcome=outcome,
        user_id=user_id,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    return {
        "data": [
            {
                **follow_up_data(follow_up),
                "member": {"id": str(member.id), "name": member.full_name},
                "recorded_by": (
                    {
                        "id": str(user.id),
                        "email": user.email,
                        "name": shepherd.full_name if shepherd else None,
                    }
                    if user
                    else None
                ),
            }
            for follow_up, member, user, shepherd in rows
        ],
        "meta": {"total": total, "page": page, "limit": limit, "total_pages": total_pages(total, limit)},
    }


@router.get("/follow-ups/stats")
def follow_ups_stats(
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    return {"data": follow_up_stats(db, acting_user)}


@router.post("/follow-ups/{follow_up_id}/complete")
def follow_up_complete(
    follow_up_id: uuid.UUID,
    data: FollowUpComplete,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        follow_up = complete_follow_up(db, acting_user, follow_up_id, data.outcome, data.notes)
        db.commit()
        db.refresh(follow_up)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Follow-up completed", "data": follow_up_data(follow_up)}


@router.delete("/follow-ups/{follow_up_id}")
def follow_up_delete(
    follow_up_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        delete_follow_up(db, acting_user, follow_up_id)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Follow-up deleted", "data": {"id": str(follow_up_id)}}
