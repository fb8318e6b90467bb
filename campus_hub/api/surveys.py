from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from ..core.dependencies import DatabaseSession
from ..core.logging import SecurityLogger
from ..core.permissions import ADMINS, SURVEY_VIEWERS, require_roles
from ..models.user import User
from ..schemas.survey import SurveyAdminSummary, SurveyCreate, SurveyRead
from ..services.survey_service import SurveyService

router = APIRouter()

SurveyViewer = Annotated[User, Depends(require_roles(SURVEY_VIEWERS))]
SurveyEditor = Annotated[User, Depends(require_roles(ADMINS))]


@router.get("/", response_model=list[SurveyAdminSummary])
async def list_surveys(db: DatabaseSession, _user: SurveyViewer):
    surveys = await SurveyService(db).list_surveys_with_counts()
    return [
        SurveyAdminSummary.model_validate(survey).model_copy(
            update={"submission_count": count}
        )
        for survey, count in surveys
    ]


@router.post("/", response_model=SurveyRead, status_code=status.HTTP_201_CREATED)
async def create_survey(
    request: Request,
    survey_data: SurveyCreate,
    db: DatabaseSession,
    user: SurveyEditor,
):
    survey_service = SurveyService(db)
    survey = await survey_service.create_survey(survey_data, creator_id=user.id)

    SecurityLogger.log_admin_action(
        request,
        admin_user_id=user.id,
        action="create_survey",
        target_id=survey.id,
        details={"question_count": len(survey_data.questions)},
    )

    created = await survey_service.get_survey(survey.id)
    return SurveyRead.model_validate(created)
