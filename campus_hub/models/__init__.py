from .base import Base
from .complaint import Complaint, ComplaintResponse
from .content import ArticleAttachment, NewsArticle
from .enums import (
    ArticleStatus,
    ComplaintStatus,
    EventStatus,
    QuestionType,
    SurveyStatus,
    UserRole,
)
from .event import Event, EventRegistration
from .file import DownloadableFile
from .survey import (
    QuestionOption,
    Survey,
    SurveyAnswer,
    SurveyQuestion,
    SurveySubmission,
)
from .user import User

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Event",
    "EventRegistration",
    "EventStatus",
    "Survey",
    "SurveyQuestion",
    "QuestionOption",
    "SurveySubmission",
    "SurveyAnswer",
    "SurveyStatus",
    "QuestionType",
    "Complaint",
    "ComplaintResponse",
    "ComplaintStatus",
    "NewsArticle",
    "ArticleAttachment",
    "ArticleStatus",
    "DownloadableFile",
]
