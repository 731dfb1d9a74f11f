"""
attention.py

대시보드 "관심 필요" 목록 API.

주요 기능:
- 비활동 회원 / 기한 초과 심방 목록 조회
- 알림 해제 (overdue → 심방 삭제, inactive → 1주 snooze)

설계 원칙:
- 목록 조회는 로그인하지 않았으면 빈 목록 (에러 X)
- 해제는 로그인 필수. 해제 기록은 현재 사용자 명의로 남김
- 이미 해제된 항목을 다시 해제하면 404

관련 파일:
- shepherd.services.attention   : 목록 계산 / 해제 로직
- shepherd.schemas.attention    : 요청/응답 스키마

"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_acting_user, get_optional_acting_user
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.schemas.attention import AttentionItemResponse, DismissRequest
from shepherd.services.attention import (
    get_members_needing_attention,
    parse_dismiss_target,
    dismiss_action_item,
)
from shepherd.services.scope import ActingUser

router = APIRouter(prefix="/attention", tags=["attention"])


@router.get("", response_model=list[AttentionItemResponse])
def attention_list(
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    return get_members_needing_attention(db, acting_user)


"""
알림 해제 API

- body: {"type": "overdue" | "inactive", "referenceId": "<uuid>"}
- 알 수 없는 type 은 400 "Invalid type"

"""
@router.post("/dismiss")
def attention_dismiss(
    data: DismissRequest,
    db: Session = Depends(get_db),
    acting_user: ActingUser = Depends(get_acting_user),
):
    try:
        target = parse_dismiss_target(data.type, data.reference_id)
        message = dismiss_action_item(db, acting_user, target)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": message, "data": {"type": data.type, "reference_id": str(data.reference_id)}}
