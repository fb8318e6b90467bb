from datetime import datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.enums import EventStatus
from ..utils.datetime_utils import ensure_utc
from .user import UserSummary


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    location: str | None = Field(None, max_length=300)
    start_time: datetime
    end_time: datetime | None = None
    registration_deadline: datetime
    max_attendees: int | None = Field(None, ge=0, description="0 or empty means unlimited")
    status: EventStatus = EventStatus.PUBLISHED
    terms_conditions: str | None = Field(None, max_length=5000)
    cover_image_url: str | None = Field(None, max_length=500)

    @model_validator(mode="after")
    def validate_schedule(self) -> Self:
        start = ensure_utc(self.start_time)

        if self.end_time is not None and ensure_utc(self.end_time) <= start:
            raise ValueError("End time must be after start time")

        if ensure_utc(self.registration_deadline) > start:
            raise ValueError("Registration deadline cannot be after the event starts")

        return self


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    location: str | None = Field(None, max_length=300)
    start_time: datetime | None = None
    end_time: datetime | None = None
    registration_deadline: datetime | None = None
    max_attendees: int | None = Field(None, ge=0)
    status: EventStatus | None = None
    terms_conditions: str | None = Field(None, max_length=5000)
    cover_image_url: str | None = Field(None, max_length=500)


class EventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    location: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    registration_deadline: datetime
    max_attendees: int | None = None
    status: EventStatus
    terms_conditions: str | None = None
    cover_image_url: str | None = None
    organizer_id: int
    created_at: datetime
    registered_count: int = 0


class StudentEventRead(EventRead):
    is_registered: bool = False


class EventRegistrationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    user_id: int
    registration_time: datetime


class EventRegistrationDetail(EventRegistrationRead):
    user: UserSummary
