"""
camps.py

캠프(Camp) API 모음.

주요 기능:
- 캠프 목록 (회원 수 포함) / 상세 / 캠프 대시보드
- 캠프 생성 / 수정 / 삭제 (Admin 전용)

설계 원칙:
- Admin 이 아닌 사용자는 자신의 캠프만 조회 (다른 캠프는 403)
- 회원이 남아 있는 캠프는 삭제 불가 (400)

관련 파일:
- shepherd.services.camps   : 캠프 비즈니스 로직
- shepherd.schemas.camp     : 요청/응답 스키마

"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_acting_user, get_current_admin
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.models.user import User
from shepherd.schemas.camp import CampCreate, CampUpdate, CampResponse
from shepherd.schemas.member import member_data
from shepherd.services.camps import (
    list_camps,
    get_camp_details,
    get_camp_dashboard,
    create_camp,
    update_camp,
    delete_camp,
)
from shepherd.services.scope import ActingUser

router = APIRouter(prefix="/camps", tags=["camps"])


def camp_data(camp) -> dict:
    return CampResponse.model_validate(camp).model_dump(mode="json")


@router.get("")
def camps_list(
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    rows = list_camps(db, acting_user)
    return {"data": [{**camp_data(camp), "member_count": count} for camp, count in rows]}


@router.get("/{camp_id}")
def camp_detail(
    camp_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        details = get_camp_details(db, acting_user, camp_id)
    except SERVICE_ERRORS as e:
        raise http_error(e)

    leader = details["leader"]
    return {
        "data": {
            **camp_data(details["camp"]),
            "leader": member_data(leader) if leader else None,
            "members": [member_data(m, details["camp"].name) for m in details["members"]],
            "stats": details["stats"],
        }
    }


"""
캠프 대시보드 API

- 회원 통계 (전체 / 활동 / 비활동 / 새신자)
- 최근 심방 10건 (현재 사용자 범위 안의 회원만)
- 캠프 소속 목자 목록

"""
@router.get("/{camp_id}/dashboard")
def camp_dashboard(
    camp_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        dashboard = get_camp_dashboard(db, acting_user, camp_id)
    except SERVICE_ERRORS as e:
        raise http_error(e)

    return {
        "data": {
            "camp": camp_data(dashboard["camp"]),
            "stats": dashboard["stats"],
            "recent_follow_ups": [
                {
                    "id": str(f.id),
                    "type": f.type.value,
                    "outcome": f.outcome.value if f.outcome else None,
                    "notes": f.notes,
                    "created_at": f.created_at.isoformat(),
                    "member": {"id": str(m.id), "name": m.full_name},
                }
                for f, m in dashboard["recent_follow_ups"]
            ],
            "shepherds": [{"id": str(u.id), "email": u.email} for u in dashboard["shepherds"]],
        }
    }


@router.post("", status_code=201)
def camp_create(
    data: CampCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        camp = create_camp(db, data.name, data.leader_id)
        db.commit()
        db.refresh(camp)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Camp created", "data": camp_data(camp)}


@router.patch("/{camp_id}")
def camp_update(
    camp_id: uuid.UUID,
    data: CampUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        camp = update_camp(db, camp_id, data.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(camp)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Camp updated", "data": camp_data(camp)}


@router.delete("/{camp_id}")
def camp_delete(
    camp_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        delete_camp(db, camp_id)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Camp deleted", "data": {"id": str(camp_id)}}
