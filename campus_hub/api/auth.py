from fastapi import APIRouter, HTTPException, Request, status

from ..core.dependencies import DatabaseSession, Tokens
from ..core.exceptions import ConflictError
from ..core.logging import SecurityLogger
from ..schemas.auth import TokenResponse, UserLogin, UserRegister
from ..schemas.common import ErrorResponse
from ..schemas.user import UserRead
from ..services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email or username already exists"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
)
async def register(
    request: Request, user_data: UserRegister, db: DatabaseSession
) -> UserRead:
    auth_service = AuthService(db)

    try:
        user = await auth_service.register_user(user_data)
    except ConflictError as e:
        SecurityLogger.log_registration(
            request, email=user_data.email, success=False, failure_reason=e.detail
        )
        raise

    SecurityLogger.log_registration(request, email=user.email, user_id=user.id)
    return UserRead.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account banned"},
    },
)
async def login(
    request: Request, login_data: UserLogin, db: DatabaseSession, tokens: Tokens
) -> TokenResponse:
    auth_service = AuthService(db)
    user = await auth_service.authenticate_user(login_data.identifier, login_data.password)

    if not user:
        SecurityLogger.log_login_attempt(
            request,
            identifier=login_data.identifier,
            success=False,
            failure_reason="invalid_credentials",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.is_banned:
        SecurityLogger.log_login_attempt(
            request,
            identifier=login_data.identifier,
            success=False,
            user_id=user.id,
            failure_reason="account_banned",
        )
        reason = user.ban_reason or "No reason provided"
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Your account has been banned. Reason: {reason}",
        )

    SecurityLogger.log_login_attempt(
        request, identifier=login_data.identifier, success=True, user_id=user.id
    )

    return TokenResponse(
        access_token=tokens.create_access_token(user.id, user.role),
        expires_in=tokens.expire_minutes * 60,
    )
