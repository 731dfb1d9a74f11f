import uuid
from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from shepherd.models.member import MemberRole, MemberStatus, Campus, Category


class MemberCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: Optional[str] = None
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    role: MemberRole = MemberRole.MEMBER
    status: MemberStatus = MemberStatus.ACTIVE
    campus: Campus = Campus.COHK
    category: Category = Category.STUDENT
    camp_id: Optional[uuid.UUID] = None
    birthday: Optional[date] = None
    join_date: Optional[date] = None
    region: Optional[str] = None
    residence: Optional[str] = None
    guardian: Optional[str] = None
    guardian_contact: Optional[str] = None
    guardian_location: Optional[str] = None
    profile_picture: Optional[str] = None


# 부분 수정: 보낸 필드만 반영 (exclude_unset)
class MemberUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    middle_name: Optional[str] = None
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    role: Optional[MemberRole] = None
    status: Optional[MemberStatus] = None
    campus: Optional[Campus] = None
    category: Optional[Category] = None
    camp_id: Optional[uuid.UUID] = None
    birthday: Optional[date] = None
    join_date: Optional[date] = None
    region: Optional[str] = None
    residence: Optional[str] = None
    guardian: Optional[str] = None
    guardian_contact: Optional[str] = None
    guardian_location: Optional[str] = None
    profile_picture: Optional[str] = None


class MemberDeleteRequest(BaseModel):
    ids: List[uuid.UUID] = Field(..., min_length=1)


class MemberResponse(BaseModel):
    id: uuid.UUID
    first_name: str
    middle_name: Optional[str]
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    role: MemberRole
    status: MemberStatus
    campus: Campus
    category: Category
    camp_id: Optional[uuid.UUID]
    birthday: Optional[date]
    join_date: date
    region: Optional[str]
    residence: Optional[str]
    guardian: Optional[str]
    guardian_contact: Optional[str]
    guardian_location: Optional[str]
    profile_picture: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UpdateLinkRequest(BaseModel):
    channel: str = Field(default="sms", pattern="^(sms|whatsapp)$")


# 라우터 응답용 dict (camp_name / can_edit 은 조회 결과에 따라 추가)
def member_data(member, camp_name: Optional[str] = None, can_edit: Optional[bool] = None) -> dict:
    data = MemberResponse.model_validate(member).model_dump(mode="json")
    data["camp_name"] = camp_name
    if can_edit is not None:
        data["can_edit"] = can_edit
    return data
