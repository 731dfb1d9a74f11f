import uuid
from typing import List

from pydantic import BaseModel, Field

from shepherd.models.member import Campus


class AssignRequest(BaseModel):
    member_ids: List[uuid.UUID] = Field(..., min_length=1)


class LeaderCampusUpdate(BaseModel):
    campuses: List[Campus]
