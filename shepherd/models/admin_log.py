"""

admin_log.py

관리 행위 기록(Audit Log) 모델 정의 파일.

이 파일은 관리자/리더에 의해 수행된 주요 관리 행위
(회원 역할 승격·강등, 회원 일괄 삭제, 시트 가져오기, 계정 생성 등)를
DB에 영구적으로 기록하기 위한 로그 테이블을 정의한다.

설계 원칙:
- 실제 데이터 변경과 로그 기록을 분리
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- 대상 회원이 삭제되어도 로그는 남아야 하므로 target_member_id 에는 FK를 걸지 않음

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shepherd.core.timeutil import utcnow
from shepherd.db.base import Base



#  관리 행위 유형 Enum

class AdminAction(str, Enum):
    PROMOTE_MEMBER = "PROMOTE_MEMBER"
    DEMOTE_MEMBER = "DEMOTE_MEMBER"
    DELETE_MEMBER = "DELETE_MEMBER"
    IMPORT_MEMBERS = "IMPORT_MEMBERS"
    CREATE_ACCOUNT = "CREATE_ACCOUNT"


"""
관리 행위 로그 모델

- actor_id         : 행위를 수행한 사용자 ID (계정 삭제 시 NULL)
- target_member_id : 행위 대상 회원 ID (없을 수 있음)
- action           : 수행된 행위 유형
- before_role      : 변경 전 역할
- after_role       : 변경 후 역할
- detail           : 부가 설명 (가져오기 결과 메시지 등)
- created_at       : 행위 발생 시각 (UTC)

"""

class AdminActionLog(Base):
    __tablename__ = "admin_action_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    target_member_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    action: Mapped[AdminAction] = mapped_column(SAEnum(AdminAction, name="admin_action"), nullable=False)

    before_role: Mapped[str | None] = mapped_column(String(20), nullable=True)
    after_role: Mapped[str | None] = mapped_column(String(20), nullable=True)

    detail: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
