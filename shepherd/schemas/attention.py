import uuid
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class AttentionItemResponse(BaseModel):
    member_id: uuid.UUID
    type: str
    reference_id: uuid.UUID
    first_name: str
    last_name: str
    reason: str
    days_overdue: Optional[int]

    model_config = ConfigDict(from_attributes=True)


# 프론트엔드가 보내는 형태 {"type": "overdue" | "inactive", "referenceId": "..."}
class DismissRequest(BaseModel):
    type: str
    reference_id: uuid.UUID = Field(..., alias="referenceId")

    model_config = ConfigDict(populate_by_name=True)
