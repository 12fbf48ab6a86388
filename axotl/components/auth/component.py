"""
Auth component - accounts, tokens and role capability.

Role strings are compared in UserRoleCapability and PolicyEngine only.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from axotl.domain.entities import User
from axotl.domain.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from axotl.domain.policy import PolicyEngine
from axotl.rules.models import AuthRules, ImagesRules
from axotl.services.images import ImageUploadService

from .models import (
    AuthOutput,
    ChangeRoleInput,
    Identity,
    LoginInput,
    RegisterInput,
    UpdateProfileInput,
    UpdateProfilePhotoInput,
)
from .ports import AuthPort, ClockPort, RoleCapabilityPort, UserRepoPort

logger = logging.getLogger(__name__)

CHANGE_ROLE_CAPABILITY = "users:change_role"
PROFILE_FOLDER = "perfil"
PROFILE_TEXT_MIN = 2
PROFILE_TEXT_MAX = 100


class UserRoleCapability:
    """Answers has_role from the user's stored role."""

    def __init__(self, users: UserRepoPort, policy: PolicyEngine):
        self.users = users
        self.policy = policy

    def has_role(self, user_id: int, allowed_roles: Sequence[str]) -> bool:
        user = self.users.get_by_id(user_id)
        if user is None:
            return False
        return self.policy.any_role(user.role, allowed_roles)


class AccountService:
    def __init__(
        self,
        users: UserRepoPort,
        auth: AuthPort,
        uploads: ImageUploadService,
        roles: RoleCapabilityPort,
        policy: PolicyEngine,
        rules: AuthRules,
        images_rules: ImagesRules,
        clock: ClockPort,
        default_role: str = "registrado",
    ):
        self.users = users
        self.auth = auth
        self.uploads = uploads
        self.roles = roles
        self.policy = policy
        self.rules = rules
        self.images_rules = images_rules
        self.clock = clock
        self.default_role = default_role
        self._email_re = re.compile(rules.email_pattern)
        self._password_re = re.compile(rules.password.pattern)

    # --- Registration and login ---

    def register(self, inp: RegisterInput) -> AuthOutput:
        email = inp.email.strip()
        if not self._email_re.match(email):
            raise ValidationError("Correo electrónico no válido", field="email", code="invalid_email")
        if len(inp.password) < self.rules.password.min_length or not self._password_re.match(
            inp.password
        ):
            raise ValidationError(
                "La contraseña debe tener al menos 8 caracteres alfanuméricos, "
                "una mayúscula, una minúscula y un número",
                field="password",
                code="weak_password",
            )
        if self.users.get_by_email(email) is not None:
            raise ConflictError(
                "El correo electrónico ya está registrado", field="email", code="email_duplicate"
            )

        now = self.clock.now()
        user = self.users.create(
            User(
                email=email,
                name=email.split("@", 1)[0],
                title=self.rules.default_title,
                role=self.default_role,  # type: ignore[arg-type]
                password_hash=self.auth.hash_password(inp.password),
                created_at=now,
                last_access=now,
            )
        )
        logger.info("User %s registered", user.id)
        return AuthOutput(user=user, token=self._token(user))

    def login(self, inp: LoginInput) -> AuthOutput:
        user = self.users.get_by_email(inp.email.strip())
        if user is None or not self.auth.verify_password(inp.password, user.password_hash):
            logger.info("Failed login attempt")
            raise AuthError("Credenciales inválidas", code="invalid_credentials")

        now = self.clock.now()
        self.users.touch_last_access(user.id or 0, now)
        user = user.model_copy(update={"last_access": now})
        return AuthOutput(user=user, token=self._token(user))

    def authenticate(self, token: str | None) -> Identity:
        """Resolve an access token into the caller's (user_id, role)."""
        if not token:
            raise AuthError("Token no proporcionado", code="missing_token")
        claims = self.auth.decode_token(token)
        if claims is None:
            raise AuthError("Token inválido o expirado", code="invalid_token")
        try:
            user_id = int(claims["sub"])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthError("Token inválido o expirado", code="invalid_token") from e

        user = self.users.get_by_id(user_id)
        if user is None:
            raise AuthError("Token inválido o expirado", code="invalid_token")
        return Identity(user_id=user_id, role=user.role)

    # --- Profile ---

    def get_user(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuario no encontrado", code="user_not_found")
        return user

    def update_profile(self, inp: UpdateProfileInput) -> User:
        if inp.caller_id != inp.user_id:
            raise ForbiddenError("Solo puedes modificar tu propio perfil")
        name = self._profile_text(inp.name, "name")
        title = self._profile_text(inp.title, "title")
        user = self.get_user(inp.user_id)

        self.users.update_profile(inp.user_id, name, title)
        return user.model_copy(update={"name": name, "title": title})

    def update_profile_photo(self, inp: UpdateProfilePhotoInput) -> User:
        if inp.caller_id != inp.user_id:
            raise ForbiddenError("Solo puedes modificar tu propio perfil")
        user = self.get_user(inp.user_id)

        path = self.uploads.store(
            inp.photo, self.images_rules.profile, PROFILE_FOLDER, field="profile_photo"
        )
        try:
            self.users.set_profile_photo(inp.user_id, path)
        except Exception:
            self.uploads.discard(path)
            raise
        self.uploads.discard(user.profile_photo)
        return user.model_copy(update={"profile_photo": path})

    # --- Administration ---

    def change_role(self, inp: ChangeRoleInput) -> User:
        if not self.roles.has_role(inp.admin_id, self.policy.roles_for(CHANGE_ROLE_CAPABILITY)):
            raise ForbiddenError("Solo un administrador puede cambiar roles")
        if not self.policy.is_valid_role(inp.role):
            raise ValidationError(f"Rol '{inp.role}' no válido", field="role", code="invalid_role")
        user = self.get_user(inp.user_id)

        self.users.set_role(inp.user_id, inp.role)
        logger.info("User %s role changed %s -> %s by %s", user.id, user.role, inp.role, inp.admin_id)
        return user.model_copy(update={"role": inp.role})

    # --- Helpers ---

    def _token(self, user: User) -> str:
        return self.auth.create_token(user.id or 0, user.role)

    @staticmethod
    def _profile_text(value: str, field: str) -> str:
        value = (value or "").strip()
        if not PROFILE_TEXT_MIN <= len(value) <= PROFILE_TEXT_MAX:
            raise ValidationError(
                f"{field} debe tener entre {PROFILE_TEXT_MIN} y {PROFILE_TEXT_MAX} caracteres",
                field=field,
                code="invalid_length",
            )
        return value
