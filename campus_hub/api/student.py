from fastapi import APIRouter, HTTPException, Request, status

from ..core.dependencies import ActiveUser, DatabaseSession
from ..core.exceptions import PortalError
from ..core.logging import SecurityLogger
from ..schemas.complaint import ComplaintCreate, ComplaintSummary
from ..schemas.content import ArticleRead, ArticleSummary
from ..schemas.event import EventRegistrationRead, StudentEventRead
from ..schemas.survey import (
    StudentSurveySummary,
    SurveyRead,
    SurveySubmissionRead,
    SurveySubmit,
)
from ..services.complaint_service import ComplaintService
from ..services.content_service import ContentService
from ..services.event_service import EventService
from ..services.registration_service import RegistrationService
from ..services.survey_service import SurveyService

router = APIRouter()


@router.get("/news", response_model=list[ArticleSummary])
async def list_news(db: DatabaseSession, _user: ActiveUser):
    articles = await ContentService(db).list_published()
    return [ArticleSummary.model_validate(article) for article in articles]


@router.get("/news/{article_id}", response_model=ArticleRead)
async def get_news_article(article_id: int, db: DatabaseSession, _user: ActiveUser):
    article = await ContentService(db).get_article(article_id, published_only=True)
    if not article:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Article not found"
        )
    return ArticleRead.model_validate(article)


@router.get("/events", response_model=list[StudentEventRead])
async def list_events(db: DatabaseSession, current_user: ActiveUser):
    event_service = EventService(db)
    events = await event_service.list_events_with_counts(published_only=True)
    registered_ids = await event_service.registered_event_ids(current_user.id)

    return [
        StudentEventRead.model_validate(event).model_copy(
            update={
                "registered_count": count,
                "is_registered": event.id in registered_ids,
            }
        )
        for event, count in events
    ]


@router.post(
    "/events/{event_id}/register",
    response_model=EventRegistrationRead,
    status_code=status.HTTP_201_CREATED,
)
async def register_for_event(
    request: Request, event_id: int, db: DatabaseSession, current_user: ActiveUser
):
    user_id = current_user.id

    try:
        registration = await RegistrationService(db).register(event_id, user_id)
    except PortalError as e:
        SecurityLogger.log_event_registration(
            request,
            user_id=user_id,
            event_id=event_id,
            success=False,
            failure_reason=type(e).__name__,
        )
        raise

    SecurityLogger.log_event_registration(
        request, user_id=user_id, event_id=event_id, success=True
    )
    return EventRegistrationRead.model_validate(registration)


@router.get("/surveys", response_model=list[StudentSurveySummary])
async def list_surveys(db: DatabaseSession, current_user: ActiveUser):
    surveys = await SurveyService(db).list_active_for_user(current_user.id)
    return [
        StudentSurveySummary.model_validate(survey).model_copy(
            update={"has_submitted": submitted}
        )
        for survey, submitted in surveys
    ]


@router.get("/surveys/{survey_id}", response_model=SurveyRead)
async def get_survey(survey_id: int, db: DatabaseSession, current_user: ActiveUser):
    survey = await SurveyService(db).get_survey_for_participant(
        survey_id, current_user.id
    )
    return SurveyRead.model_validate(survey)


@router.post(
    "/surveys/{survey_id}/submit",
    response_model=SurveySubmissionRead,
    status_code=status.HTTP_201_CREATED,
)
async def submit_survey(
    request: Request,
    survey_id: int,
    submission_data: SurveySubmit,
    db: DatabaseSession,
    current_user: ActiveUser,
):
    user_id = current_user.id

    try:
        submission = await SurveyService(db).submit(
            survey_id, user_id, submission_data.answers
        )
    except PortalError as e:
        SecurityLogger.log_survey_submission(
            request,
            user_id=user_id,
            survey_id=survey_id,
            success=False,
            failure_reason=type(e).__name__,
        )
        raise

    SecurityLogger.log_survey_submission(
        request,
        user_id=user_id,
        survey_id=survey_id,
        success=True,
        answer_count=len(submission_data.answers),
    )
    return SurveySubmissionRead.model_validate(submission)


@router.post(
    "/complaints",
    response_model=ComplaintSummary,
    status_code=status.HTTP_201_CREATED,
)
async def submit_complaint(
    complaint_data: ComplaintCreate, db: DatabaseSession, current_user: ActiveUser
):
    complaint = await ComplaintService(db).create_complaint(complaint_data, current_user)
    return ComplaintSummary.model_validate(complaint)
