import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from shepherd.models.pastoral import FollowUpType, FollowUpOutcome


class FollowUpCreate(BaseModel):
    type: FollowUpType
    notes: Optional[str] = None
    outcome: Optional[FollowUpOutcome] = None
    # 값이 있으면 예약된 후속 연락 (completed_at 없음 → 대기)
    scheduled_at: Optional[datetime] = None


class FollowUpComplete(BaseModel):
    outcome: Optional[FollowUpOutcome] = None
    notes: Optional[str] = None


class FollowUpResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    user_id: Optional[uuid.UUID]
    type: FollowUpType
    notes: Optional[str]
    outcome: Optional[FollowUpOutcome]
    scheduled_at: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
