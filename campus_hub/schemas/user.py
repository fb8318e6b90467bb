from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models.enums import UserRole


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    username: str
    profile_image_url: str | None = None


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    username: str
    email: str
    role: UserRole
    phone_number: str | None = None
    academic_year: str | None = None
    country: str | None = None
    profile_image_url: str | None = None
    is_banned: bool
    ban_reason: str | None = None
    created_at: datetime


class UserAdminUpdate(BaseModel):
    full_name: str | None = Field(None, min_length=2, max_length=150)
    username: str | None = Field(
        None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$"
    )
    email: EmailStr | None = None
    role: UserRole | None = None
    phone_number: str | None = Field(None, max_length=30)
    academic_year: str | None = Field(None, max_length=50)
    country: str | None = Field(None, max_length=100)
    is_banned: bool | None = None
    ban_reason: str | None = Field(None, max_length=1000)
