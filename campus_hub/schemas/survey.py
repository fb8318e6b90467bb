from datetime import datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.enums import QuestionType, SurveyStatus
from .user import UserSummary


class QuestionCreate(BaseModel):
    question_text: str = Field(..., min_length=1, max_length=500)
    question_type: QuestionType
    options: list[str] = Field(default_factory=list)

    @field_validator("options")
    @classmethod
    def strip_options(cls, v: list[str]) -> list[str]:
        options = [option.strip() for option in v]
        if any(not option for option in options):
            raise ValueError("Options cannot be empty")
        if len(set(options)) != len(options):
            raise ValueError("Options must be unique")
        return options

    @model_validator(mode="after")
    def validate_options_for_type(self) -> Self:
        if self.question_type == QuestionType.TEXT and self.options:
            raise ValueError("Text questions cannot have options")
        if self.question_type != QuestionType.TEXT and len(self.options) < 2:
            raise ValueError("Choice questions need at least two options")
        return self


class SurveyCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    status: SurveyStatus = SurveyStatus.DRAFT
    questions: list[QuestionCreate] = Field(..., min_length=1)


class SurveyAnswerCreate(BaseModel):
    question_id: int
    option_id: int | None = None
    answer_text: str | None = Field(None, max_length=5000)

    @field_validator("answer_text")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def validate_one_kind(self) -> Self:
        if self.option_id is None and self.answer_text is None:
            raise ValueError("An answer needs either option_id or answer_text")
        return self


class SurveySubmit(BaseModel):
    answers: list[SurveyAnswerCreate] = Field(..., min_length=1)


class QuestionOptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    option_text: str


class SurveyQuestionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question_text: str
    question_type: QuestionType
    position: int
    options: list[QuestionOptionRead] = []


class SurveySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    status: SurveyStatus
    created_at: datetime


class SurveyRead(SurveySummary):
    creator_id: int
    questions: list[SurveyQuestionRead] = []


class SurveyAdminSummary(SurveySummary):
    creator: UserSummary
    submission_count: int = 0


class StudentSurveySummary(SurveySummary):
    has_submitted: bool = False


class SurveySubmissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    survey_id: int
    user_id: int
    submitted_at: datetime
