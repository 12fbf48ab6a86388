from dataclasses import dataclass

from axotl.domain.entities import User
from axotl.domain.uploads import UploadedFile


@dataclass(frozen=True)
class RegisterInput:
    email: str
    password: str


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class UpdateProfileInput:
    caller_id: int
    user_id: int
    name: str
    title: str


@dataclass(frozen=True)
class UpdateProfilePhotoInput:
    caller_id: int
    user_id: int
    photo: UploadedFile


@dataclass(frozen=True)
class ChangeRoleInput:
    admin_id: int
    user_id: int
    role: str


@dataclass(frozen=True)
class Identity:
    """Verified caller resolved from an access token."""

    user_id: int
    role: str


@dataclass(frozen=True)
class AuthOutput:
    user: User
    token: str
