"""
Engagement component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AddCommentInput:
    author_id: int
    publication_id: int
    content: str


@dataclass(frozen=True)
class FavoriteToggleResult:
    is_favorite: bool
    total_favorites: int
