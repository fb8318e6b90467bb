from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status

from ..core.dependencies import ActiveUser, AppSettings, DatabaseSession
from ..core.logging import SecurityLogger
from ..database import transaction
from ..schemas.auth import PasswordUpdate
from ..schemas.common import MessageResponse
from ..schemas.dashboard import ProfileOverview
from ..schemas.user import UserRead
from ..services.auth_service import AuthService
from ..services.dashboard_service import DashboardService
from ..services.file_service import FileStorageService

router = APIRouter()


@router.get("/me", response_model=ProfileOverview)
async def get_my_profile(db: DatabaseSession, current_user: ActiveUser):
    activity = await DashboardService(db).get_profile_activity(current_user.id)
    return ProfileOverview.model_validate(
        {"user": UserRead.model_validate(current_user), **activity},
        from_attributes=True,
    )


@router.post("/picture", response_model=UserRead)
async def upload_profile_picture(
    db: DatabaseSession,
    settings: AppSettings,
    current_user: ActiveUser,
    file: UploadFile = File(...),
):
    storage = FileStorageService(settings)
    image_url = await storage.save_profile_image(file, current_user.id)

    async with transaction(db):
        current_user.profile_image_url = image_url

    return UserRead.model_validate(current_user)


@router.put("/password", response_model=MessageResponse)
async def change_password(
    request: Request,
    password_data: PasswordUpdate,
    db: DatabaseSession,
    current_user: ActiveUser,
):
    changed = await AuthService(db).change_password(
        current_user, password_data.current_password, password_data.new_password
    )
    if not changed:
        SecurityLogger.log_login_attempt(
            request,
            identifier=current_user.username,
            success=False,
            user_id=current_user.id,
            failure_reason="password_change_wrong_current_password",
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    return MessageResponse(message="Password updated successfully")
