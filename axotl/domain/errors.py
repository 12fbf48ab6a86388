"""
Error taxonomy for publishing operations.

Every error carries a stable machine ``code`` and an HTTP-style
``status_code`` so the API layer can translate it without inspecting
messages. Validation and authorization errors are raised before any
mutation happens.
"""

from __future__ import annotations

from typing import Any


class AxotlError(Exception):
    """Base error for all domain failures."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, code: str | None = None, field: str | None = None,
                 detail: Any = None) -> None:
        self.message = message
        self.field = field
        self.detail = detail
        if code is not None:
            self.code = code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": "error", "code": self.code, "message": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationError(AxotlError):
    """Missing or malformed input the user can correct."""

    status_code = 400
    code = "validation_error"


class AuthError(AxotlError):
    """Missing or invalid credentials."""

    status_code = 401
    code = "auth_error"


class ForbiddenError(AxotlError):
    """Authenticated, but not allowed to act on this resource."""

    status_code = 403
    code = "forbidden"


class NotFoundError(AxotlError):
    """Resource absent, soft-deleted or not visible to the caller."""

    status_code = 404
    code = "not_found"


class ConflictError(AxotlError):
    """Duplicate unique key or a state conflict."""

    status_code = 409
    code = "conflict"


class InvalidTransitionError(ConflictError):
    """Raised when a publication state change is not in the transition table."""

    code = "invalid_transition"

    def __init__(self, from_state: str, to_state: str, reason: str = "") -> None:
        self.from_state = from_state
        self.to_state = to_state
        msg = f"Cannot transition from '{from_state}' to '{to_state}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, field="state")


class InternalError(AxotlError):
    """Datastore or filesystem failure. The message shown to users is generic."""

    status_code = 500
    code = "internal_error"
