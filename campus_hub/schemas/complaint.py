from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models.enums import ComplaintStatus
from .user import UserSummary


class ComplaintCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=5000)
    phone_number: str | None = Field(None, max_length=30)


class ComplaintStatusUpdate(BaseModel):
    status: ComplaintStatus


class ComplaintResponseCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=5000)


class ComplaintResponseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message: str
    created_at: datetime
    responder: UserSummary


class ComplaintSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    category: str
    status: ComplaintStatus
    created_at: datetime


class ComplaintRead(ComplaintSummary):
    description: str
    phone_number: str | None = None
    user: UserSummary
    responses: list[ComplaintResponseRead] = []
