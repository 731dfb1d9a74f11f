from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict


# 회원 셀프 수정 가능 필드만 (나머지는 무시하지 않고 422)
class ProfileUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    birthday: Optional[date] = None
    residence: Optional[str] = None
    region: Optional[str] = None
    guardian: Optional[str] = None
    guardian_contact: Optional[str] = None
    guardian_location: Optional[str] = None
    profile_picture: Optional[str] = None

    model_config = ConfigDict(extra="forbid")
