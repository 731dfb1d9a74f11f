"""
services/app_settings.py

키/값 설정(AppSetting) 저장소 및 가져오기 진행 상황(progress) 슬롯.

- 조회 시 기본값과 병합
- upsert 방식 저장 (마지막 쓰기 우선)
- 'sync_progress' 키에 {current, total, status, message} JSON 저장

NOTE:
- 진행 상황 읽기는 오래되었거나 없는 값도 허용 (None 반환)

"""

import json
import logging
from dataclasses import dataclass, asdict

from sqlalchemy import select
from sqlalchemy.orm import Session

from shepherd.core.timeutil import utcnow
from shepherd.models.app_setting import AppSetting

logger = logging.getLogger(__name__)

SYNC_PROGRESS_KEY = "sync_progress"

DEFAULT_SETTINGS = {
    "ministryName": "Agape Bible Studies",
    "campusName": "CoHK",
    "defaultMeetingUrl": "https://meet.google.com/pqr-wira-sxh",
    "birthdayReminders": "true",
    "attendanceAlerts": "true",
    "newConvertFollowups": "true",
    "theme": "agape-blue",
}


@dataclass
class ImportProgress:
    current: int
    total: int
    status: str
    message: str

    def to_json(self) -> str:
        return json.dumps(asdict(self))


def get_settings(db: Session) -> dict[str, str]:
    values = dict(DEFAULT_SETTINGS)
    for setting in db.scalars(select(AppSetting).where(AppSetting.key != SYNC_PROGRESS_KEY)).all():
        values[setting.key] = setting.value
    return values


def save_setting(db: Session, key: str, value: str) -> AppSetting:
    key = key.strip()
    if not key:
        raise ValueError("Setting key is required")
    if key == SYNC_PROGRESS_KEY:
        raise ValueError(f"'{SYNC_PROGRESS_KEY}' is reserved")

    setting = db.get(AppSetting, key)
    if setting is None:
        setting = AppSetting(key=key, value=value)
        db.add(setting)
    else:
        setting.value = value
        setting.updated_at = utcnow()
    db.flush()
    return setting


def save_settings(db: Session, values: dict[str, str]) -> None:
    for key, value in values.items():
        save_setting(db, key, value)


def write_progress(db: Session, progress: ImportProgress) -> None:
    setting = db.get(AppSetting, SYNC_PROGRESS_KEY)
    if setting is None:
        db.add(AppSetting(key=SYNC_PROGRESS_KEY, value=progress.to_json()))
    else:
        setting.value = progress.to_json()
        setting.updated_at = utcnow()
    db.flush()


def read_progress(db: Session) -> dict | None:
    setting = db.get(AppSetting, SYNC_PROGRESS_KEY)
    if setting is None:
        return None
    try:
        return json.loads(setting.value)
    except ValueError:
        logger.warning("Ignoring malformed sync progress value")
        return None
