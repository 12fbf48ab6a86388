from datetime import datetime
from typing import Any, Protocol


class AuthPort(Protocol):
    def hash_password(self, password: str) -> str: ...

    def verify_password(self, plain: str, hashed: str) -> bool: ...

    def create_token(self, user_id: int, role: str, now_utc: datetime | None = None) -> str: ...

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Claims of a valid token, None if invalid or expired."""
        ...
