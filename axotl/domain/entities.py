from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

# --- Enums / Literals ---
RoleType = Literal["usuario", "registrado", "moderador", "administrador"]
PublicationState = Literal["borrador", "en_revision", "publicado", "rechazado"]
ReviewDecision = Literal["publicado", "rechazado"]
NotificationType = Literal["comentario", "favorito", "revision", "comentario_revision"]
ReferenceType = Literal["publicacion", "comentario", "revision"]

ROLES: tuple[RoleType, ...] = ("usuario", "registrado", "moderador", "administrador")
STATES: tuple[PublicationState, ...] = ("borrador", "en_revision", "publicado", "rechazado")


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Users ---

class User(BaseModel):
    id: int | None = None
    email: str
    name: str
    title: str = ""
    role: RoleType = "registrado"
    profile_photo: str | None = None
    password_hash: str = Field(default="", repr=False, exclude=True)
    created_at: datetime = Field(default_factory=utcnow)
    last_access: datetime | None = None


# --- Publications ---

class PublicationType(BaseModel):
    id: int
    name: str
    description: str = ""


class Publication(BaseModel):
    id: int | None = None
    owner_id: int
    type_id: int
    title: str = ""
    summary: str = ""
    content: str = ""
    references: str = ""
    cover_image_path: str | None = None
    state: PublicationState = "borrador"
    is_private: bool = True
    deleted: bool = False
    deleted_at: datetime | None = None
    review_comment: str | None = None
    reviewer_id: int | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    published_at: datetime | None = None


class PublicationView(Publication):
    """Publication joined with author and category names for read paths."""

    author_name: str = ""
    author_photo: str | None = None
    type_name: str = ""
    total_favorites: int = 0
    total_comments: int = 0


class PublicationImage(BaseModel):
    id: int | None = None
    publication_id: int
    url: str
    description: str = ""
    order: int = 1


# --- Engagement ---

class Comment(BaseModel):
    id: int | None = None
    publication_id: int
    author_id: int
    content: str
    author_name: str = ""
    created_at: datetime = Field(default_factory=utcnow)


class Favorite(BaseModel):
    user_id: int
    publication_id: int
    created_at: datetime = Field(default_factory=utcnow)


# --- Notifications ---

class Notification(BaseModel):
    id: int | None = None
    recipient_id: int
    origin_id: int | None = None
    type: NotificationType
    reference_id: int
    reference_type: ReferenceType = "publicacion"
    content: str
    read: bool = False
    notify_by_email: bool = True
    origin_name: str | None = None
    origin_photo: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
