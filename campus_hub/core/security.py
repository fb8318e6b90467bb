from datetime import timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from ..config import Settings
from ..models.enums import UserRole
from ..utils.datetime_utils import utc_now

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


class TokenService:
    """Signs and verifies access tokens with the server-held secret."""

    def __init__(self, settings: Settings):
        self._secret_key = settings.SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self.expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_access_token(
        self,
        user_id: int,
        role: UserRole,
        expires_delta: timedelta | None = None,
    ) -> str:
        expire = utc_now() + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode: dict[str, object] = {
            "sub": str(user_id),
            "role": role.value,
            "exp": expire,
            "type": ACCESS_TOKEN_TYPE,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify_token(self, token: str) -> dict[str, object] | None:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError:
            return None
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            return None
        return payload

    def resolve_user_id(self, token: str) -> int | None:
        payload = self.verify_token(token)
        if payload is None:
            return None

        user_id = payload.get("sub")
        if not isinstance(user_id, (str, int)):
            return None
        try:
            return int(user_id)
        except ValueError:
            return None
