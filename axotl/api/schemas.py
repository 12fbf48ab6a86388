from typing import Any, Literal

from fastapi import UploadFile
from pydantic import BaseModel, Field

from axotl.domain.uploads import UploadedFile


# --- Envelope ---
def envelope(message: str, data: Any = None) -> dict[str, Any]:
    """Success payload shared by every endpoint."""
    return {"message": message, "data": data}


def read_upload(upload: UploadFile | None) -> UploadedFile | None:
    if upload is None or not upload.filename:
        return None
    return UploadedFile(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=upload.file.read(),
    )


# --- Auth ---
class RegisterRequest(BaseModel):
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


# --- Users ---
class ProfileUpdateRequest(BaseModel):
    name: str
    title: str


class RoleChangeRequest(BaseModel):
    role: str


# --- Review ---
class ReviewRequest(BaseModel):
    decision: Literal["publicado", "rechazado"]
    review_comment: str | None = Field(default=None, max_length=2000)


# --- Engagement ---
class CommentCreateRequest(BaseModel):
    content: str
