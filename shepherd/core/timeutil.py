"""
timeutil.py

UTC 기준 시각 처리 유틸리티.

- 모든 저장 시각은 timezone-aware UTC로 생성
- SQLite 등 timezone 정보를 보존하지 않는 드라이버에서 읽은
  naive datetime은 UTC로 간주하여 보정

"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
