from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shepherd.core.timeutil import utcnow
from shepherd.db.base import Base


class AppSetting(Base):
    """키/값 설정 레코드.

    - 사역 이름, 기본 모임 URL 등 화면 설정
    - 'sync_progress' 키는 시트 가져오기 진행 상황(JSON) 공유 슬롯으로 사용
    """

    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
