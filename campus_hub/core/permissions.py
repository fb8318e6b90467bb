from collections.abc import Awaitable, Callable, Iterable

from fastapi import Depends, Request

from ..models.enums import UserRole
from ..models.user import User
from .dependencies import get_current_active_user
from .exceptions import ForbiddenError
from .logging import SecurityLogger

RoleSet = frozenset[UserRole]

ADMINS: RoleSet = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN})
CONTENT_EDITORS: RoleSet = ADMINS | {UserRole.EDITOR}
CONTENT_VIEWERS: RoleSet = CONTENT_EDITORS | {UserRole.MANAGER}
EVENT_EDITORS: RoleSet = ADMINS
EVENT_VIEWERS: RoleSet = CONTENT_VIEWERS
EVENT_DETAIL_VIEWERS: RoleSet = CONTENT_EDITORS
SURVEY_VIEWERS: RoleSet = ADMINS | {UserRole.MANAGER}
COMPLAINT_HANDLERS: RoleSet = ADMINS | {UserRole.MODERATOR}
ALL_ROLES: RoleSet = frozenset(UserRole)


def is_allowed(role: UserRole, allowed_roles: Iterable[UserRole]) -> bool:
    return role in frozenset(allowed_roles)


def authorize(user: User, allowed_roles: RoleSet) -> User:
    if not is_allowed(user.role, allowed_roles):
        raise ForbiddenError()
    return user


def require_roles(allowed_roles: RoleSet) -> Callable[..., Awaitable[User]]:
    async def role_checker(
        request: Request, current_user: User = Depends(get_current_active_user)
    ) -> User:
        try:
            return authorize(current_user, allowed_roles)
        except ForbiddenError:
            SecurityLogger.log_access_denied(
                request,
                user_id=current_user.id,
                role=current_user.role.value,
                allowed_roles=sorted(role.value for role in allowed_roles),
            )
            raise

    return role_checker
