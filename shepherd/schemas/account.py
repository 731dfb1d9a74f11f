import uuid
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from shepherd.models.user import Role


class AccountCreate(BaseModel):
    email: EmailStr
    role: Role
    password: Optional[str] = Field(default=None, min_length=6)
    member_id: Optional[uuid.UUID] = Field(default=None, alias="memberId")
    camp_id: Optional[uuid.UUID] = Field(default=None, alias="campId")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


def account_data(user, member=None, camp_name: Optional[str] = None) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "member_id": str(user.member_id) if user.member_id else None,
        "camp_id": str(user.camp_id) if user.camp_id else None,
        "camp_name": camp_name,
        "name": member.full_name if member else None,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }
