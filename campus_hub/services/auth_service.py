from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError
from ..core.security import get_password_hash, verify_password
from ..database import transaction
from ..models.enums import UserRole
from ..models.user import User
from ..schemas.auth import UserRegister


class AuthService:
    db: AsyncSession

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_user(self, user_data: UserRegister) -> User:
        email = user_data.email.lower()

        async with transaction(self.db):
            result = await self.db.execute(
                select(User).where(
                    (User.email == email) | (User.username == user_data.username)
                )
            )
            existing_user = result.scalars().first()

            if existing_user:
                if existing_user.email == email:
                    raise ConflictError("Email already registered")
                raise ConflictError("Username already taken")

            db_user = User(
                full_name=user_data.full_name,
                username=user_data.username,
                email=email,
                password_hash=get_password_hash(user_data.password),
                academic_year=user_data.academic_year,
                country=user_data.country,
                role=UserRole.STUDENT,
            )
            self.db.add(db_user)
            try:
                await self.db.flush()
            except IntegrityError as e:
                raise ConflictError("Email or username already registered") from e

        return db_user

    async def authenticate_user(self, identifier: str, password: str) -> User | None:
        identifier = identifier.strip()
        result = await self.db.execute(
            select(User).where(
                or_(User.email == identifier.lower(), User.username == identifier)
            )
        )
        user = result.scalars().first()

        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    async def change_password(
        self, user: User, current_password: str, new_password: str
    ) -> bool:
        if not verify_password(current_password, user.password_hash):
            return False

        async with transaction(self.db):
            user.password_hash = get_password_hash(new_password)
        return True
