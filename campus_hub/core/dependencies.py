from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings
from ..database import get_db
from ..models.user import User
from .exceptions import ForbiddenError, UnauthenticatedError
from .security import TokenService

security = HTTPBearer(auto_error=False)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


AppSettings = Annotated[Settings, Depends(get_settings)]
Tokens = Annotated[TokenService, Depends(get_token_service)]


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_service: Tokens,
    db: DatabaseSession,
) -> User:
    if not credentials or not credentials.credentials:
        raise UnauthenticatedError("Not authenticated")

    # Bad signature, expiry and a vanished account all look the same to the caller.
    user_id = token_service.resolve_user_id(credentials.credentials)
    if user_id is None:
        raise UnauthenticatedError()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise UnauthenticatedError()

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def get_current_active_user(current_user: CurrentUser) -> User:
    if current_user.is_banned:
        raise ForbiddenError("This account is banned")
    return current_user


ActiveUser = Annotated[User, Depends(get_current_active_user)]
