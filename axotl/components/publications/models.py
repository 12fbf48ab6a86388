"""
Publication component input/output models.

Every operation takes one frozen input struct. Field values left as None
are "not supplied" and keep whatever is stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from axotl.domain.entities import Publication, PublicationState
from axotl.domain.uploads import UploadedFile


@dataclass(frozen=True)
class PublicationFields:
    title: str | None = None
    summary: str | None = None
    content: str | None = None
    references: str | None = None
    is_private: bool | None = None

    def updates(self) -> dict[str, Any]:
        """Supplied fields only, keyed by Publication attribute."""
        values = {
            "title": self.title,
            "summary": self.summary,
            "content": self.content,
            "references": self.references,
            "is_private": self.is_private,
        }
        return {k: v for k, v in values.items() if v is not None}


# --- Input Models ---


@dataclass(frozen=True)
class CreatePublicationInput:
    owner_id: int
    type_id: int | None
    fields: PublicationFields = field(default_factory=PublicationFields)
    submit: bool = False
    cover: UploadedFile | None = None


@dataclass(frozen=True)
class UpsertDraftInput:
    """draft_id None asks the server to assign the id."""

    caller_id: int
    type_id: int | None
    fields: PublicationFields = field(default_factory=PublicationFields)
    draft_id: int | None = None
    cover: UploadedFile | None = None


@dataclass(frozen=True)
class SubmitForReviewInput:
    caller_id: int
    publication_id: int
    fields: PublicationFields = field(default_factory=PublicationFields)
    type_id: int | None = None
    cover: UploadedFile | None = None


@dataclass(frozen=True)
class UpdatePublicationInput:
    caller_id: int
    publication_id: int
    type_id: int | None
    fields: PublicationFields = field(default_factory=PublicationFields)
    state: PublicationState | None = None
    cover: UploadedFile | None = None


@dataclass(frozen=True)
class ReviewDecisionInput:
    reviewer_id: int
    publication_id: int
    decision: str
    review_comment: str | None = None


@dataclass(frozen=True)
class AddImageInput:
    caller_id: int
    publication_id: int
    image: UploadedFile
    description: str = ""


# --- Output Models ---


@dataclass(frozen=True)
class UpsertDraftOutput:
    publication: Publication
    created: bool
