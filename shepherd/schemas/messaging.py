import uuid
from typing import Literal, Optional, List

from pydantic import BaseModel, Field

Channel = Literal["sms", "email"]


class MemberMessageRequest(BaseModel):
    channel: Channel = "sms"
    message: str = Field(..., min_length=1)
    subject: Optional[str] = None


class AnnouncementRequest(BaseModel):
    message: str = Field(..., min_length=1)
    subject: Optional[str] = None
    channels: List[Channel] = Field(default_factory=lambda: ["sms"], min_length=1)


class ChannelsRequest(BaseModel):
    channels: List[Channel] = Field(default_factory=lambda: ["sms"], min_length=1)


class EventNotificationRequest(ChannelsRequest):
    event_id: uuid.UUID
