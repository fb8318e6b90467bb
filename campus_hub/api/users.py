from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..core.dependencies import DatabaseSession
from ..core.logging import SecurityLogger
from ..core.permissions import ADMINS, require_roles
from ..models.user import User
from ..schemas.user import UserAdminUpdate, UserRead
from ..services.user_service import UserService

router = APIRouter()

AdminUser = Annotated[User, Depends(require_roles(ADMINS))]


@router.get("/", response_model=list[UserRead])
async def list_users(
    db: DatabaseSession,
    _admin: AdminUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> list[UserRead]:
    users = await UserService(db).list_users(skip=skip, limit=limit)
    return [UserRead.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, db: DatabaseSession, _admin: AdminUser) -> UserRead:
    user = await UserService(db).get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    request: Request,
    user_id: int,
    user_data: UserAdminUpdate,
    db: DatabaseSession,
    admin: AdminUser,
) -> UserRead:
    user_service = UserService(db)
    user = await user_service.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user = await user_service.update_user(user, user_data)

    SecurityLogger.log_admin_action(
        request,
        admin_user_id=admin.id,
        action="update_user",
        target_id=user.id,
        details={"fields": sorted(user_data.model_fields_set)},
    )
    return UserRead.model_validate(user)
