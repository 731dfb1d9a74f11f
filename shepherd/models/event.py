import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid, UniqueConstraint, Index, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from shepherd.core.timeutil import utcnow
from shepherd.db.base import Base
from shepherd.models.user import enum_values


class EventType(str, Enum):
    SERVICE = "Service"
    RETREAT = "Retreat"
    MEETING = "Meeting"
    OUTREACH = "Outreach"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    EXCUSED = "Excused"


class Event(Base):
    """예배/수련회/모임 등 날짜가 있는 행사.

    camp_id 가 None 이면 전체(관리자) 행사, 값이 있으면 해당 캠프 행사.
    recurrence: 'weekly' 같은 반복 태그 (자유 문자열)
    """

    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    type: Mapped[EventType] = mapped_column(
        SAEnum(EventType, name="event_type", values_callable=enum_values),
        nullable=False,
        default=EventType.SERVICE,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    meeting_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    recurrence: Mapped[str | None] = mapped_column(String(30), nullable=True)

    camp_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("camps.id"), nullable=True, index=True)
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class AttendanceRecord(Base):
    """출석 기록. (member, event) 쌍마다 최대 1건 (upsert)"""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("member_id", "event_id", name="uq_attendance_member_event"),
        Index("ix_attendance_event_id", "event_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("members.id"), nullable=False)
    event_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("events.id"), nullable=False)

    status: Mapped[AttendanceStatus] = mapped_column(
        SAEnum(AttendanceStatus, name="attendance_status", values_callable=enum_values),
        nullable=False,
        default=AttendanceStatus.PRESENT,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
