import uuid
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict

from shepherd.models.event import EventType, AttendanceStatus


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    date: datetime
    type: EventType = EventType.SERVICE
    description: Optional[str] = None
    meeting_url: Optional[str] = Field(default=None, max_length=500)
    recurrence: Optional[str] = Field(default=None, max_length=30, examples=["weekly"])
    # Admin 만 지정 가능 (비우면 전체 행사)
    camp_id: Optional[uuid.UUID] = None


class EventResponse(BaseModel):
    id: uuid.UUID
    name: str
    date: datetime
    type: EventType
    description: Optional[str]
    meeting_url: Optional[str]
    recurrence: Optional[str]
    camp_id: Optional[uuid.UUID]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttendanceMark(BaseModel):
    member_id: uuid.UUID
    status: AttendanceStatus = AttendanceStatus.PRESENT
    notes: Optional[str] = None


class BulkAttendanceRequest(BaseModel):
    records: List[AttendanceMark] = Field(..., min_length=1)
