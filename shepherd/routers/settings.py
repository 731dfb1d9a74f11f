"""
settings.py

앱 설정(키/값) API.

- 조회: 로그인한 모든 사용자 (기본값과 병합된 값)
- 저장: Admin 전용, 여러 키를 한 번에 upsert
- 'sync_progress' 는 가져오기 진행 상황 전용 키라 설정으로 저장 불가 (400)

"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_current_user, get_current_admin
from shepherd.core.errors import SERVICE_ERRORS, http_error, db_error
from shepherd.models.user import User
from shepherd.schemas.settings import SettingsUpdate
from shepherd.services.app_settings import get_settings, save_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("")
def settings_get(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"data": get_settings(db)}


@router.put("")
def settings_save(
    data: SettingsUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        save_settings(db, data.values)
        db.commit()
    except SERVICE_ERRORS as e:
        db.rollback()
        raise http_error(e)
    except Exception as e:
        db.rollback()
        raise db_error(e)

    return {"message": "Settings saved", "data": get_settings(db)}
