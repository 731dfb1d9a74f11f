import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class CampCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    leader_id: Optional[uuid.UUID] = None


class CampUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    leader_id: Optional[uuid.UUID] = None


class CampResponse(BaseModel):
    id: uuid.UUID
    name: str
    leader_id: Optional[uuid.UUID]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
