"""
pastoral.py

목양(Pastoral care) 관련 모델 정의 파일.

- MemberAssignment : 회원 → 목자(Shepherd User) 배정
- LeaderCampus     : 리더(User) → 담당 캠퍼스 목록
- FollowUp         : 심방/연락 기록 및 예약된 후속 연락

FollowUp 상태 규칙:
- scheduled_at 있음 + completed_at 없음  → 대기(pending)
- 대기 중이면서 scheduled_at < now       → 기한 초과(overdue)
- completed_at 있음                      → 완료 (최근 1주 이내면 비활동 알림 snooze)

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Text, Uuid, UniqueConstraint, Index, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from shepherd.core.timeutil import utcnow
from shepherd.db.base import Base
from shepherd.models.member import Campus
from shepherd.models.user import enum_values


class FollowUpType(str, Enum):
    CALL = "Call"
    WHATSAPP = "WhatsApp"
    PRAYER = "Prayer"
    VISIT = "Visit"
    OTHER = "Other"


class FollowUpOutcome(str, Enum):
    REACHED = "Reached"
    NO_ANSWER = "NoAnswer"
    SCHEDULED_CALLBACK = "ScheduledCallback"


class MemberAssignment(Base):
    __tablename__ = "member_assignments"
    __table_args__ = (
        Index("ix_member_assignments_shepherd_id", "shepherd_id"),
        Index("ix_member_assignments_member_id", "member_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("members.id"), nullable=False)
    shepherd_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class LeaderCampus(Base):
    __tablename__ = "leader_campuses"
    __table_args__ = (
        UniqueConstraint("leader_id", "campus", name="uq_leader_campuses_leader_campus"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    leader_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    campus: Mapped[Campus] = mapped_column(
        SAEnum(Campus, name="campus", values_callable=enum_values),
        nullable=False,
    )


class FollowUp(Base):
    __tablename__ = "follow_ups"
    __table_args__ = (
        Index("ix_follow_ups_member_id", "member_id"),
        Index("ix_follow_ups_scheduled_at", "scheduled_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("members.id"), nullable=False)
    # 기록한 사용자. 계정이 삭제(강등)되어도 기록은 남긴다
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    type: Mapped[FollowUpType] = mapped_column(
        SAEnum(FollowUpType, name="follow_up_type", values_callable=enum_values),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    outcome: Mapped[FollowUpOutcome | None] = mapped_column(
        SAEnum(FollowUpOutcome, name="follow_up_outcome", values_callable=enum_values),
        nullable=True,
    )

    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
