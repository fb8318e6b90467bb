from datetime import datetime

from sqlalchemy import (
    String,
    Text,
    Integer,
    ForeignKey,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base
from .enums import QuestionType, SurveyStatus
from .types import UTCDateTime
from ..utils.datetime_utils import utc_now


class Survey(Base):
    __tablename__ = "surveys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[SurveyStatus] = mapped_column(
        SQLEnum(SurveyStatus), nullable=False, default=SurveyStatus.DRAFT
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now()
    )

    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    creator: Mapped["User"] = relationship("User", back_populates="surveys")
    questions: Mapped[list["SurveyQuestion"]] = relationship(
        "SurveyQuestion",
        back_populates="survey",
        order_by="SurveyQuestion.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    submissions: Mapped[list["SurveySubmission"]] = relationship(
        "SurveySubmission",
        back_populates="survey",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class SurveyQuestion(Base):
    __tablename__ = "survey_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_text: Mapped[str] = mapped_column(String(500), nullable=False)
    question_type: Mapped[QuestionType] = mapped_column(
        SQLEnum(QuestionType), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    survey_id: Mapped[int] = mapped_column(
        ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False
    )

    survey: Mapped["Survey"] = relationship("Survey", back_populates="questions")
    options: Mapped[list["QuestionOption"]] = relationship(
        "QuestionOption",
        back_populates="question",
        order_by="QuestionOption.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class QuestionOption(Base):
    __tablename__ = "question_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    option_text: Mapped[str] = mapped_column(String(300), nullable=False)

    question_id: Mapped[int] = mapped_column(
        ForeignKey("survey_questions.id", ondelete="CASCADE"), nullable=False
    )

    question: Mapped["SurveyQuestion"] = relationship(
        "SurveyQuestion", back_populates="options"
    )


class SurveySubmission(Base):
    __tablename__ = "survey_submissions"
    __table_args__ = (
        UniqueConstraint("survey_id", "user_id", name="uq_survey_submission_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    submitted_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, server_default=func.now()
    )

    survey_id: Mapped[int] = mapped_column(
        ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    survey: Mapped["Survey"] = relationship("Survey", back_populates="submissions")
    user: Mapped["User"] = relationship("User", back_populates="survey_submissions")
    answers: Mapped[list["SurveyAnswer"]] = relationship(
        "SurveyAnswer",
        back_populates="submission",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class SurveyAnswer(Base):
    __tablename__ = "survey_answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    answer_text: Mapped[str | None] = mapped_column(Text)

    submission_id: Mapped[int] = mapped_column(
        ForeignKey("survey_submissions.id", ondelete="CASCADE"), nullable=False
    )
    question_id: Mapped[int] = mapped_column(
        ForeignKey("survey_questions.id"), nullable=False
    )
    option_id: Mapped[int | None] = mapped_column(ForeignKey("question_options.id"))

    submission: Mapped["SurveySubmission"] = relationship(
        "SurveySubmission", back_populates="answers"
    )
