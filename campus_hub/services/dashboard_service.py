from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.complaint import Complaint
from ..models.content import NewsArticle
from ..models.enums import (
    ArticleStatus,
    ComplaintStatus,
    EventStatus,
    SurveyStatus,
    UserRole,
)
from ..models.event import Event, EventRegistration
from ..models.file import DownloadableFile
from ..models.survey import Survey, SurveySubmission
from ..models.user import User
from ..utils.datetime_utils import utc_now
from .event_service import EventService

FEED_ITEMS_PER_SECTION = 2
PROFILE_RECENT_ITEMS = 5


class DashboardService:
    db: AsyncSession

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *criteria) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(model).where(*criteria)
        )
        return result.scalar() or 0

    async def get_stats(self, user: User) -> dict[str, int]:
        open_complaints = Complaint.status != ComplaintStatus.CLOSED

        if user.role in (UserRole.SUPER_ADMIN, UserRole.ADMIN):
            return {
                "users": await self._count(User),
                "articles": await self._count(NewsArticle),
                "events": await self._count(Event),
                "surveys": await self._count(Survey),
                "complaints": await self._count(Complaint),
                "open_complaints": await self._count(Complaint, open_complaints),
                "files": await self._count(DownloadableFile),
            }

        if user.role == UserRole.EDITOR:
            return {
                "my_articles": await self._count(
                    NewsArticle, NewsArticle.author_id == user.id
                ),
                "published_articles": await self._count(
                    NewsArticle, NewsArticle.status == ArticleStatus.PUBLISHED
                ),
                "events": await self._count(Event),
            }

        if user.role == UserRole.MANAGER:
            return {
                "events": await self._count(Event),
                "active_surveys": await self._count(
                    Survey, Survey.status == SurveyStatus.ACTIVE
                ),
                "survey_submissions": await self._count(SurveySubmission),
                "event_registrations": await self._count(EventRegistration),
            }

        if user.role == UserRole.MODERATOR:
            return {
                "complaints": await self._count(Complaint),
                "open_complaints": await self._count(Complaint, open_complaints),
            }

        return {
            "my_event_registrations": await self._count(
                EventRegistration, EventRegistration.user_id == user.id
            ),
            "my_complaints": await self._count(Complaint, Complaint.user_id == user.id),
            "my_survey_submissions": await self._count(
                SurveySubmission, SurveySubmission.user_id == user.id
            ),
            "upcoming_events": await self._count(
                Event,
                Event.status == EventStatus.PUBLISHED,
                Event.start_time > utc_now(),
            ),
        }

    async def get_home_feed(self) -> dict[str, list]:
        events = await EventService(self.db).list_events_with_counts(
            published_only=True, limit=FEED_ITEMS_PER_SECTION
        )

        surveys = await self.db.execute(
            select(Survey)
            .where(Survey.status == SurveyStatus.ACTIVE)
            .order_by(Survey.created_at.desc(), Survey.id.desc())
            .limit(FEED_ITEMS_PER_SECTION)
        )
        files = await self.db.execute(
            select(DownloadableFile)
            .order_by(DownloadableFile.created_at.desc(), DownloadableFile.id.desc())
            .limit(FEED_ITEMS_PER_SECTION)
        )

        return {
            "events": [(event, count) for event, count in events],
            "surveys": list(surveys.scalars().all()),
            "files": list(files.scalars().all()),
        }

    async def get_profile_activity(self, user_id: int) -> dict[str, list]:
        registrations = await self.db.execute(
            select(EventRegistration)
            .where(EventRegistration.user_id == user_id)
            .order_by(EventRegistration.registration_time.desc())
            .limit(PROFILE_RECENT_ITEMS)
        )
        complaints = await self.db.execute(
            select(Complaint)
            .where(Complaint.user_id == user_id)
            .order_by(Complaint.created_at.desc(), Complaint.id.desc())
            .limit(PROFILE_RECENT_ITEMS)
        )
        submissions = await self.db.execute(
            select(SurveySubmission)
            .where(SurveySubmission.user_id == user_id)
            .order_by(SurveySubmission.submitted_at.desc())
            .limit(PROFILE_RECENT_ITEMS)
        )

        return {
            "event_registrations": list(registrations.scalars().all()),
            "complaints": list(complaints.scalars().all()),
            "survey_submissions": list(submissions.scalars().all()),
        }
