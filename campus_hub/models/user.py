from datetime import datetime

from sqlalchemy import Boolean, Integer, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base
from .enums import UserRole
from .types import UTCDateTime
from ..utils.datetime_utils import utc_now


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(150), nullable=False)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole), nullable=False, default=UserRole.STUDENT
    )

    phone_number: Mapped[str | None] = mapped_column(String(30))
    academic_year: Mapped[str | None] = mapped_column(String(50))
    country: Mapped[str | None] = mapped_column(String(100))
    profile_image_url: Mapped[str | None] = mapped_column(String(500))

    is_banned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ban_reason: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now()
    )

    organized_events: Mapped[list["Event"]] = relationship(
        "Event", back_populates="organizer"
    )
    event_registrations: Mapped[list["EventRegistration"]] = relationship(
        "EventRegistration", back_populates="user"
    )
    surveys: Mapped[list["Survey"]] = relationship("Survey", back_populates="creator")
    survey_submissions: Mapped[list["SurveySubmission"]] = relationship(
        "SurveySubmission", back_populates="user"
    )
    complaints: Mapped[list["Complaint"]] = relationship(
        "Complaint", back_populates="user"
    )
    articles: Mapped[list["NewsArticle"]] = relationship(
        "NewsArticle", back_populates="author"
    )
