"""
assignments.py

목자 ↔ 회원 배정 및 리더 ↔ 캠퍼스 배정 API.

주요 기능:
- 목자/리더 목록 조회
- 아직 목자가 없는 회원 목록 (배정 화면용)
- 목자에게 회원 배정 (기존 목자는 교체) / 배정 해제
- 목자별 배정 회원 목록
- 리더 담당 캠퍼스 조회 / 전체 교체 (Admin 전용)

설계 원칙:
- 배정/해제는 Admin, Leader 만 (Leader 는 자신의 캠프 안에서만)
- Shepherd 는 자신의 배정 회원 목록만 조회

관련 파일:
- shepherd.services.assignments  : 배정 비즈니스 로직
- shepherd.schemas.assignment    : 요청 스키마

"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_acting_user, get_current_admin
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.models.user import User, Role
from shepherd.schemas.assignment import AssignRequest, LeaderCampusUpdate
from shepherd.schemas.member import member_data
from shepherd.services.assignments import (
    assign_members,
    remove_assignment,
    shepherd_members,
    list_staff,
    leader_campuses,
    replace_leader_campuses,
    available_members,
)
from shepherd.services.scope import ActingUser

router = APIRouter(tags=["assignments"])


def _staff_list(db: Session, acting_user: ActingUser, *roles: Role) -> dict:
    try:
        rows = list_staff(db, acting_user, *roles)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return {
        "data": [
            {
                "id": str(user.id),
                "email": user.email,
                "role": user.role.value,
                "camp_id": str(user.camp_id) if user.camp_id else None,
                "member_id": str(user.member_id) if user.member_id else None,
                "name": member.full_name if member else None,
            }
            for user, member in rows
        ]
    }


@router.get("/shepherds")
def shepherds_list(
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    return _staff_list(db, acting_user, Role.SHEPHERD)


@router.get("/leaders")
def leaders_list(
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    return _staff_list(db, acting_user, Role.LEADER)


# 범위 안에서 아직 목자에게 배정되지 않은 회원
@router.get("/assignments/available-members")
def available_member_list(
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        rows = available_members(db, acting_user)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return {"data": [member_data(member, camp_name) for member, camp_name in rows]}


@router.get("/shepherds/{shepherd_id}/members")
def shepherd_member_list(
    shepherd_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        rows = shepherd_members(db, acting_user, shepherd_id)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return {
        "data": [
            {**member_data(member), "assigned_at": assigned_at.isoformat()}
            for member, assigned_at in rows
        ]
    }


"""
회원 배정 API

- body: {"member_ids": [...]}
- 이미 다른 목자에게 배정된 회원은 이 목자로 교체
- 범위 밖 회원이 하나라도 있으면 전체 거부 (403)

"""
@router.post("/shepherds/{shepherd_id}/members")
def shepherd_assign(
    shepherd_id: uuid.UUID,
    data: AssignRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        assigned = assign_members(db, acting_user, shepherd_id, data.member_ids)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": f"Assigned {assigned} member(s)", "data": {"assigned": assigned}}


@router.delete("/shepherds/{shepherd_id}/members/{member_id}")
def shepherd_unassign(
    shepherd_id: uuid.UUID,
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        remove_assignment(db, acting_user, shepherd_id, member_id)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Assignment removed", "data": {"shepherd_id": str(shepherd_id), "member_id": str(member_id)}}


@router.get("/leaders/{leader_id}/campuses")
def leader_campus_list(
    leader_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return {"data": [c.value for c in leader_campuses(db, leader_id)]}


@router.put("/leaders/{leader_id}/campuses")
def leader_campus_replace(
    leader_id: uuid.UUID,
    data: LeaderCampusUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        campuses = replace_leader_campuses(db, leader_id, data.campuses)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Leader campuses updated", "data": [c.value for c in campuses]}
