from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt
from passlib.context import CryptContext

ALGORITHM = "HS256"


class JWTAuthAdapter:
    """Password hashing with passlib (argon2) and HS256 access tokens with python-jose."""

    def __init__(self, secret_key: str, ttl_minutes: int = 60 * 24):
        self.secret_key = secret_key
        self.ttl_minutes = ttl_minutes
        self.pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

    def hash_password(self, password: str) -> str:
        result: str = self.pwd_context.hash(password)
        return result

    def verify_password(self, plain: str, hashed: str) -> bool:
        if not hashed or self.pwd_context.identify(hashed) is None:
            return False
        result: bool = self.pwd_context.verify(plain, hashed)
        return result

    def create_token(self, user_id: int, role: str, now_utc: datetime | None = None) -> str:
        """
        Create a JWT access token carrying the user id and role.

        Args:
            user_id: Subject of the token
            role: Role claim
            now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
        """
        current_time = now_utc if now_utc is not None else datetime.now(UTC)
        claims = {
            "sub": str(user_id),
            "role": role,
            "exp": current_time + timedelta(minutes=self.ttl_minutes),
        }
        encoded: str = jwt.encode(claims, self.secret_key, algorithm=ALGORITHM)
        return encoded

    def decode_token(self, token: str) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
            return cast(dict[str, Any], payload)
        except JWTError:
            return None
