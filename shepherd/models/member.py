"""
member.py

회원 명부(Member) 모델 정의 파일.

교회/사역 공동체의 구성원 정보(연락처, 생일, 보호자 정보 등)를 관리하며
출석, 심방(FollowUp), 목자 배정, 메시지 발송의 기준이 되는 핵심 모델이다.

- email 은 고유(nullable), phone 은 가져오기(import) 시 upsert 키로 사용
- role 이 Leader / Shepherd 로 바뀌면 연결된 User 계정이 생성/갱신됨
- update_token 은 회원 셀프 프로필 수정 링크용 1회성 토큰

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import String, Date, DateTime, ForeignKey, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from shepherd.core.timeutil import utcnow
from shepherd.db.base import Base
from shepherd.models.user import enum_values


class MemberRole(str, Enum):
    LEADER = "Leader"
    SHEPHERD = "Shepherd"
    MEMBER = "Member"
    NEW_CONVERT = "New Convert"
    GUEST = "Guest"


class MemberStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ARCHIVED = "Archived"


class Campus(str, Enum):
    COHK = "CoHK"
    KNUST = "KNUST"
    LEGON = "Legon"
    OTHER = "Other"


class Category(str, Enum):
    STUDENT = "Student"
    WORKFORCE = "Workforce"
    NSS = "NSS"
    ALUMNI = "Alumni"


# User 계정이 필요한 회원 역할
STAFF_MEMBER_ROLES = (MemberRole.LEADER, MemberRole.SHEPHERD)


class Member(Base):
    __tablename__ = "members"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), index=True, nullable=True)

    role: Mapped[MemberRole] = mapped_column(
        SAEnum(MemberRole, name="member_role", values_callable=enum_values),
        nullable=False,
        default=MemberRole.MEMBER,
    )
    status: Mapped[MemberStatus] = mapped_column(
        SAEnum(MemberStatus, name="member_status", values_callable=enum_values),
        nullable=False,
        default=MemberStatus.ACTIVE,
        index=True,
    )
    campus: Mapped[Campus] = mapped_column(
        SAEnum(Campus, name="campus", values_callable=enum_values),
        nullable=False,
        default=Campus.COHK,
    )
    category: Mapped[Category] = mapped_column(
        SAEnum(Category, name="category", values_callable=enum_values),
        nullable=False,
        default=Category.STUDENT,
    )

    camp_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("camps.id"), nullable=True, index=True)

    birthday: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    join_date: Mapped[datetime.date] = mapped_column(Date, nullable=False, default=lambda: utcnow().date())

    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    residence: Mapped[str | None] = mapped_column(String(255), nullable=True)
    guardian: Mapped[str | None] = mapped_column(String(255), nullable=True)
    guardian_contact: Mapped[str | None] = mapped_column(String(50), nullable=True)
    guardian_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(String(500), nullable=True)

    update_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    token_expires_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
