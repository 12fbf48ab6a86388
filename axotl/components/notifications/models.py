"""
Notification component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from axotl.domain.entities import Notification, NotificationType, ReferenceType

# --- Message templates ---

COMMENT_TEMPLATE = '{actor} ha comentado en tu publicación "{title}"'
FAVORITE_TEMPLATE = '{actor} ha marcado como favorito tu publicación "{title}"'
APPROVED_TEMPLATE = 'Tu publicación "{title}" ha sido aprobada por {reviewer}'
REJECTED_TEMPLATE = 'Tu publicación "{title}" ha sido rechazada por {reviewer}'

EMAIL_SUBJECTS: dict[str, str] = {
    "comentario": "Nuevo comentario en tu publicación",
    "favorito": "Tu publicación tiene un nuevo favorito",
    "revision": "Tu publicación ha sido revisada",
    "comentario_revision": "Nuevo comentario de revisión",
}


# --- Input Models ---


@dataclass(frozen=True)
class NotifyInput:
    """A single notification to create. origin_id None means a system event."""

    recipient_id: int
    origin_id: int | None
    type: NotificationType
    reference_id: int
    content: str
    reference_type: ReferenceType = "publicacion"
    notify_by_email: bool = True


@dataclass(frozen=True)
class ListNotificationsInput:
    owner_id: int
    page: int = 1
    limit: int | None = None
    read: bool | None = None


# --- Output Models ---


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


@dataclass(frozen=True)
class NotificationPage:
    items: list[Notification] = field(default_factory=list)
    pagination: Pagination = field(default_factory=lambda: Pagination(1, 20, 0))
    unread: int = 0
