"""
members.py

회원 명부(Member) API 모음.

주요 기능:
- 범위(scope) 적용 회원 목록 / 상세 조회 (can_edit 포함)
- 회원 생성 / 부분 수정 / 일괄 삭제
- 캠퍼스 / 카테고리별 목록 및 집계

설계 원칙:
- 목록/집계 조회는 토큰이 없거나 유효하지 않아도 에러 없이 빈 결과
- 상세/생성/수정/삭제는 로그인 필수
- 범위 밖 회원은 403, 없는 회원은 404 로 구분
- 역할 승격/강등 시 User 계정 동기화와 관리자 로그 기록을 같은 트랜잭션에서 수행
- 외부 identity 삭제는 커밋 이후에 수행 (DB 롤백 시 외부 계정이 먼저 지워지지 않도록)

관련 파일:
- shepherd.services.members   : 회원 비즈니스 로직
- shepherd.services.roles     : Leader/Shepherd 계정 동기화
- shepherd.services.scope     : 접근 범위 정책
- shepherd.schemas.member     : 요청/응답 스키마

"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_acting_user, get_optional_acting_user, get_identity_provider
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.models.admin_log import AdminAction
from shepherd.models.member import Campus, Category
from shepherd.schemas.member import MemberCreate, MemberUpdate, MemberDeleteRequest, member_data
from shepherd.services.admin_log import write_admin_log
from shepherd.services.identity import IdentityProvider
from shepherd.services.members import (
    list_members,
    campus_stats,
    get_member,
    create_member,
    update_member,
    delete_members,
)
from shepherd.services.roles import StaffSyncResult
from shepherd.services.scope import ActingUser

router = APIRouter(prefix="/members", tags=["members"])


def _log_role_change(db: Session, actor: ActingUser, member, before_role, sync: StaffSyncResult) -> None:
    if sync.action is None:
        return
    write_admin_log(
        db,
        actor_id=actor.id,
        action=sync.action,
        target_member_id=member.id,
        before_role=before_role.value if before_role else None,
        after_role=member.role.value,
    )


"""
회원 목록 조회 API

- 현재 사용자 범위 안의 회원만 반환 (최근 등록 순)
- campus / category 쿼리로 추가 필터

"""
@router.get("")
def members_list(
    campus: Campus | None = None,
    category: Category | None = None,
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    rows = list_members(db, acting_user, campus=campus, category=category)
    return {
        "data": [member_data(m, camp_name, can_edit) for m, camp_name, can_edit in rows],
        "meta": {"total": len(rows)},
    }


@router.get("/stats")
def members_stats(
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    return {"data": campus_stats(db, acting_user)}


@router.get("/campus/{campus}")
def members_by_campus(
    campus: Campus,
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    rows = list_members(db, acting_user, campus=campus)
    return {"data": [member_data(m, camp_name, can_edit) for m, camp_name, can_edit in rows]}


@router.get("/category/{category}")
def members_by_category(
    category: Category,
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    rows = list_members(db, acting_user, category=category)
    return {"data": [member_data(m, camp_name, can_edit) for m, camp_name, can_edit in rows]}


@router.get("/{member_id}")
def member_detail(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        member, camp_name = get_member(db, acting_user, member_id)
    except SERVICE_ERRORS as e:
        raise http_error(e)
    return {"data": member_data(member, camp_name, True)}


"""
회원 생성 API

- Admin: 모든 캠프 / Leader: 자신의 캠프로 고정 / Shepherd: 불가(403)
- Leader / Shepherd 역할로 생성하면 User 계정도 함께 생성 (Admin 전용)

"""
@router.post("", status_code=201)
def member_create(
    data: MemberCreate,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    try:
        member, sync = create_member(db, acting_user, data.model_dump(), identity)
        _log_role_change(db, acting_user, member, None, sync)
        db.commit()
        db.refresh(member)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Member created", "data": member_data(member, can_edit=True)}


"""
회원 수정 API (부분 수정)

- 보낸 필드만 반영
- 역할이 Leader/Shepherd 로 바뀌면 계정 생성/갱신, 다른 역할로 바뀌면 계정 삭제

"""
@router.patch("/{member_id}")
def member_update(
    member_id: uuid.UUID,
    data: MemberUpdate,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        before_role = get_member(db, acting_user, member_id)[0].role
        member, sync = update_member(db, acting_user, member_id, changes, identity)
        _log_role_change(db, acting_user, member, before_role, sync)
        db.commit()
        db.refresh(member)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    if sync.removed_user_id is not None:
        identity.delete_identity(sync.removed_user_id)

    return {"message": "Member updated", "data": member_data(member, can_edit=True)}


"""
회원 일괄 삭제 API (Admin 전용)

- 출석 / 심방 / 배정 기록과 연결 계정까지 정리
- 삭제된 계정의 외부 identity 는 커밋 후 삭제

"""
@router.post("/delete")
def members_delete(
    data: MemberDeleteRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    try:
        deleted, removed_user_ids = delete_members(db, acting_user, data.ids)
        if deleted:
            write_admin_log(
                db,
                actor_id=acting_user.id,
                action=AdminAction.DELETE_MEMBER,
                detail=f"Deleted {deleted} member(s)",
            )
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    for user_id in removed_user_ids:
        identity.delete_identity(user_id)

    return {"message": f"Deleted {deleted} member(s)", "data": {"deleted": deleted}}
