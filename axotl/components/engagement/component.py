"""
Engagement component - favorites and comments on published publications.

Invariants:
- Favorites and comments only attach to publicly visible publications.
  Removing an existing favorite does not check visibility.
- A favorite or comment and its notification are written in one
  transaction: both exist or neither does.
- Toggling a favorite twice restores the original state.
"""

from __future__ import annotations

import logging

from axotl.components.notifications import NotificationDispatcher
from axotl.domain.entities import Comment
from axotl.domain.errors import ForbiddenError, NotFoundError, ValidationError

from .models import AddCommentInput, FavoriteToggleResult
from .ports import (
    ClockPort,
    CommentRepoPort,
    FavoriteRepoPort,
    GatewayPort,
    PublicationRepoPort,
)

logger = logging.getLogger(__name__)


class EngagementService:
    def __init__(
        self,
        gateway: GatewayPort,
        publications: PublicationRepoPort,
        comments: CommentRepoPort,
        favorites: FavoriteRepoPort,
        notifier: NotificationDispatcher,
        clock: ClockPort,
    ):
        self.gateway = gateway
        self.publications = publications
        self.comments = comments
        self.favorites = favorites
        self.notifier = notifier
        self.clock = clock

    # --- Favorites ---

    def toggle_favorite(self, user_id: int, publication_id: int) -> FavoriteToggleResult:
        with self.gateway.transaction():
            if self.favorites.remove(user_id, publication_id):
                is_favorite = False
            else:
                # only new favorites need a visible publication
                self._require_visible(publication_id)
                is_favorite = self.favorites.add(user_id, publication_id, self.clock.now())
                if is_favorite:
                    self.notifier.notify_new_favorite(publication_id, user_id)
                else:
                    # lost a race with a concurrent add of the same pair
                    is_favorite = True
            total = self.favorites.count_for_publication(publication_id)

        logger.info(
            "User %s %s publication %s",
            user_id,
            "favorited" if is_favorite else "unfavorited",
            publication_id,
        )
        return FavoriteToggleResult(is_favorite=is_favorite, total_favorites=total)

    def is_favorite(self, user_id: int, publication_id: int) -> bool:
        return self.favorites.exists(user_id, publication_id)

    def favorite_count(self, publication_id: int) -> int:
        return self.favorites.count_for_publication(publication_id)

    # --- Comments ---

    def add_comment(self, inp: AddCommentInput) -> Comment:
        content = inp.content.strip() if inp.content else ""
        if not content:
            raise ValidationError(
                "El contenido del comentario es obligatorio", field="content", code="empty_comment"
            )
        self._require_visible(inp.publication_id)

        with self.gateway.transaction():
            comment = self.comments.add(
                Comment(
                    publication_id=inp.publication_id,
                    author_id=inp.author_id,
                    content=content,
                    created_at=self.clock.now(),
                )
            )
            self.notifier.notify_new_comment(inp.publication_id, inp.author_id)

        logger.info("Comment %s added to publication %s", comment.id, inp.publication_id)
        return comment

    def delete_comment(self, caller_id: int, comment_id: int) -> None:
        comment = self.comments.get_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comentario no encontrado", code="comment_not_found")
        if comment.author_id != caller_id:
            raise ForbiddenError("No tienes permiso para eliminar este comentario")
        self.comments.delete(comment_id)

    def list_comments(self, publication_id: int) -> list[Comment]:
        self._require_visible(publication_id)
        return self.comments.list_for_publication(publication_id)

    def _require_visible(self, publication_id: int) -> None:
        if self.publications.get_view(publication_id, public_only=True) is None:
            raise NotFoundError("Publicación no encontrada", code="publication_not_found")
