"""
Auth component - registration, login, profiles and role capability.
"""

from .component import AccountService, UserRoleCapability
from .models import (
    AuthOutput,
    ChangeRoleInput,
    Identity,
    LoginInput,
    RegisterInput,
    UpdateProfileInput,
    UpdateProfilePhotoInput,
)

__all__ = [
    "AccountService",
    "UserRoleCapability",
    # Models
    "AuthOutput",
    "ChangeRoleInput",
    "Identity",
    "LoginInput",
    "RegisterInput",
    "UpdateProfileInput",
    "UpdateProfilePhotoInput",
]
