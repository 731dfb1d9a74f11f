"""
admin.py

관리자 전용 API.

- 관리 행위 로그 조회 (역할 승격/강등, 회원 삭제, 명부 가져오기, 계정 생성)
- 로그인 계정 목록 조회 / 직접 생성

관련 파일:
- shepherd.services.admin_log  : 로그 기록 / 조회
- shepherd.services.accounts   : 계정 목록 / 생성

"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_current_admin, get_identity_provider
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.models.admin_log import AdminAction
from shepherd.models.user import User
from shepherd.schemas.account import AccountCreate, account_data
from shepherd.services.accounts import list_users, create_user_account
from shepherd.services.admin_log import write_admin_log, list_admin_logs
from shepherd.services.identity import IdentityProvider
from shepherd.services.scope import ActingUser

router = APIRouter(prefix="/admin", tags=["admin"])


# 관리 행위 로그 (최신순)
@router.get("/logs")
def admin_logs(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return {"data": list_admin_logs(db, limit=limit)}


@router.get("/users")
def users_list(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    rows = list_users(db, ActingUser.from_user(current_admin))
    return {"data": [account_data(user, member, camp_name) for user, member, camp_name in rows]}


"""
계정 생성 API

- body: {email, role, password?, memberId?, campId?}
- 이미 등록된 이메일 / 이미 계정이 있는 회원은 400
- 회원에 Leader/Shepherd 계정을 연결하면 회원 역할도 승격 (PROMOTE_MEMBER 로그)

"""
@router.post("/users", status_code=201)
def user_create(
    data: AccountCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    try:
        created = create_user_account(
            db,
            ActingUser.from_user(current_admin),
            identity,
            email=data.email,
            role=data.role,
            password=data.password,
            member_id=data.member_id,
            camp_id=data.camp_id,
        )
        member = created.member
        write_admin_log(
            db,
            actor_id=current_admin.id,
            action=AdminAction.CREATE_ACCOUNT,
            target_member_id=member.id if member else None,
            after_role=created.user.role.value,
            detail=created.user.email,
        )
        if member is not None and member.role != created.before_role:
            write_admin_log(
                db,
                actor_id=current_admin.id,
                action=AdminAction.PROMOTE_MEMBER,
                target_member_id=member.id,
                before_role=created.before_role.value,
                after_role=member.role.value,
            )
        db.commit()
        db.refresh(created.user)
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Account created", "data": account_data(created.user, member)}
