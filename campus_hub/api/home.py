from fastapi import APIRouter

from ..core.dependencies import ActiveUser, DatabaseSession
from ..schemas.dashboard import HomeFeed
from ..schemas.event import EventRead
from ..schemas.file import DownloadableFileRead
from ..schemas.survey import SurveySummary
from ..services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/feed", response_model=HomeFeed)
async def get_home_feed(db: DatabaseSession, _user: ActiveUser):
    feed = await DashboardService(db).get_home_feed()
    return HomeFeed(
        events=[
            EventRead.model_validate(event).model_copy(
                update={"registered_count": count}
            )
            for event, count in feed["events"]
        ],
        surveys=[SurveySummary.model_validate(s) for s in feed["surveys"]],
        files=[DownloadableFileRead.model_validate(f) for f in feed["files"]],
    )
