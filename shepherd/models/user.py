"""
user.py

로그인 사용자(User) 및 권한(Role) 모델 정의 파일.

User는 외부 Identity Provider의 계정(subject id)과 1:1로 대응하는
"인가(Authorization)" 단위이며, 회원 명부(Member)와는 별개의 테이블이다.

- id 는 Identity Provider가 발급한 subject id 와 동일
- member_id 로 회원 프로필(이름 표시용)과 선택적으로 연결
- camp_id 가 있으면 Leader 의 조회/수정 범위를 해당 캠프로 제한

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import String, DateTime, ForeignKey, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from shepherd.core.timeutil import utcnow
from shepherd.db.base import Base



"""
사용자 권한(Role) 정의

- ADMIN     : 전체 회원/캠프 관리 (제한 없음)
- LEADER    : 자신의 캠프(camp_id) 회원만 관리
- SHEPHERD  : 배정(MemberAssignment)된 회원만 관리

"""

class Role(str, Enum):
    ADMIN = "Admin"
    LEADER = "Leader"
    SHEPHERD = "Shepherd"


def enum_values(enum_cls):
    # DB에는 Enum 이름(ADMIN)이 아니라 값(Admin)을 저장
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="user_role", values_callable=enum_values),
        nullable=False,
        default=Role.SHEPHERD,
    )

    member_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("members.id"), nullable=True, index=True)
    camp_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("camps.id"), nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
