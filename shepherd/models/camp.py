import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shepherd.core.timeutil import utcnow
from shepherd.db.base import Base


class Camp(Base):
    """캠프(소그룹) 레코드.

    leader_id: 캠프 리더 회원(Member). members.camp_id 와 순환 참조라 use_alter 사용
    """

    __tablename__ = "camps"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    leader_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("members.id", use_alter=True, ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
