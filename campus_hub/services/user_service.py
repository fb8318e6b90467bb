from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, InvalidInputError
from ..database import transaction
from ..models.user import User
from ..schemas.user import UserAdminUpdate


NON_NULLABLE_FIELDS = ("full_name", "username", "email", "role", "is_banned")


class UserService:
    db: AsyncSession

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(self, skip: int = 0, limit: int = 50) -> list[User]:
        result = await self.db.execute(
            select(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_user(self, user_id: int) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def update_user(self, user: User, user_data: UserAdminUpdate) -> User:
        update_data = user_data.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_FIELDS:
            if field in update_data and update_data[field] is None:
                raise InvalidInputError(f"{field} cannot be null")

        if "email" in update_data and update_data["email"]:
            update_data["email"] = update_data["email"].lower()

        async with transaction(self.db):
            for field, value in update_data.items():
                setattr(user, field, value)

            if update_data.get("is_banned") is False:
                user.ban_reason = None

            try:
                await self.db.flush()
            except IntegrityError as e:
                raise ConflictError("Email or username already in use") from e

        return user
