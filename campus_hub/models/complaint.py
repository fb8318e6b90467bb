from datetime import datetime

from sqlalchemy import String, Text, Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base
from .enums import ComplaintStatus
from .types import UTCDateTime
from ..utils.datetime_utils import utc_now


class Complaint(Base):
    __tablename__ = "complaints"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(30))
    status: Mapped[ComplaintStatus] = mapped_column(
        SQLEnum(ComplaintStatus), nullable=False, default=ComplaintStatus.RECEIVED
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now()
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="complaints")
    responses: Mapped[list["ComplaintResponse"]] = relationship(
        "ComplaintResponse",
        back_populates="complaint",
        order_by="ComplaintResponse.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class ComplaintResponse(Base):
    __tablename__ = "complaint_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now()
    )

    complaint_id: Mapped[int] = mapped_column(
        ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False
    )
    responder_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    complaint: Mapped["Complaint"] = relationship(
        "Complaint", back_populates="responses"
    )
    responder: Mapped["User"] = relationship("User")
