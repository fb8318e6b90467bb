from pydantic import BaseModel

from ..models.enums import UserRole
from .complaint import ComplaintSummary
from .event import EventRead, EventRegistrationRead
from .file import DownloadableFileRead
from .survey import SurveySummary, SurveySubmissionRead
from .user import UserRead


class DashboardStats(BaseModel):
    role: UserRole
    stats: dict[str, int]


class HomeFeed(BaseModel):
    events: list[EventRead]
    surveys: list[SurveySummary]
    files: list[DownloadableFileRead]


class ProfileOverview(BaseModel):
    user: UserRead
    event_registrations: list[EventRegistrationRead]
    complaints: list[ComplaintSummary]
    survey_submissions: list[SurveySubmissionRead]
