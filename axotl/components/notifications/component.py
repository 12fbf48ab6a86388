"""
Notification component - the single place notification rows are created.

Invariants:
- No row is created when the actor is also the recipient.
- The recipient must exist.
- Read-state changes are scoped to the recipient.
"""

from __future__ import annotations

import logging

from axotl.domain.entities import Notification, Publication, ReviewDecision
from axotl.domain.errors import NotFoundError, ValidationError

from .models import (
    APPROVED_TEMPLATE,
    COMMENT_TEMPLATE,
    EMAIL_SUBJECTS,
    FAVORITE_TEMPLATE,
    REJECTED_TEMPLATE,
    ListNotificationsInput,
    NotificationPage,
    NotifyInput,
    Pagination,
)
from .ports import (
    ClockPort,
    MailerPort,
    NotificationRepoPort,
    PublicationRepoPort,
    UserRepoPort,
)

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class NotificationDispatcher:
    def __init__(
        self,
        notifications: NotificationRepoPort,
        users: UserRepoPort,
        publications: PublicationRepoPort,
        mailer: MailerPort,
        clock: ClockPort,
        page_size: int = 20,
        notify_by_email_default: bool = True,
    ):
        self.notifications = notifications
        self.users = users
        self.publications = publications
        self.mailer = mailer
        self.clock = clock
        self.page_size = page_size
        self.notify_by_email_default = notify_by_email_default

    # --- Core ---

    def notify(self, inp: NotifyInput) -> Notification | None:
        """
        Create a notification.

        Returns None without touching storage when the actor notifies themself.
        Raises NotFoundError if the recipient does not exist.
        """
        if inp.origin_id is not None and inp.origin_id == inp.recipient_id:
            logger.debug(
                "Suppressed self-notification type=%s user=%s", inp.type, inp.recipient_id
            )
            return None

        recipient = self.users.get_by_id(inp.recipient_id)
        if recipient is None:
            raise NotFoundError("Destinatario no encontrado", code="recipient_not_found")

        created = self.notifications.add(
            Notification(
                recipient_id=inp.recipient_id,
                origin_id=inp.origin_id,
                type=inp.type,
                reference_id=inp.reference_id,
                reference_type=inp.reference_type,
                content=inp.content,
                notify_by_email=inp.notify_by_email,
                created_at=self.clock.now(),
            )
        )
        logger.info(
            "Notification %s created type=%s recipient=%s", created.id, inp.type, inp.recipient_id
        )

        if inp.notify_by_email:
            self.mailer.send(inp.recipient_id, EMAIL_SUBJECTS[inp.type], inp.content)
        return created

    # --- Event wrappers ---

    def notify_new_comment(self, publication_id: int, actor_id: int) -> Notification | None:
        publication = self._publication(publication_id)
        content = COMMENT_TEMPLATE.format(
            actor=self._display_name(actor_id), title=publication.title
        )
        return self.notify(
            NotifyInput(
                recipient_id=publication.owner_id,
                origin_id=actor_id,
                type="comentario",
                reference_id=publication_id,
                content=content,
                notify_by_email=self.notify_by_email_default,
            )
        )

    def notify_new_favorite(self, publication_id: int, actor_id: int) -> Notification | None:
        publication = self._publication(publication_id)
        content = FAVORITE_TEMPLATE.format(
            actor=self._display_name(actor_id), title=publication.title
        )
        return self.notify(
            NotifyInput(
                recipient_id=publication.owner_id,
                origin_id=actor_id,
                type="favorito",
                reference_id=publication_id,
                content=content,
                notify_by_email=self.notify_by_email_default,
            )
        )

    def notify_review_decision(
        self, publication_id: int, reviewer_id: int, decision: ReviewDecision
    ) -> Notification | None:
        publication = self._publication(publication_id)
        template = APPROVED_TEMPLATE if decision == "publicado" else REJECTED_TEMPLATE
        content = template.format(
            title=publication.title, reviewer=self._display_name(reviewer_id)
        )
        return self.notify(
            NotifyInput(
                recipient_id=publication.owner_id,
                origin_id=reviewer_id,
                type="revision",
                reference_id=publication_id,
                content=content,
                notify_by_email=self.notify_by_email_default,
            )
        )

    # --- Read state ---

    def mark_read(self, notification_id: int, owner_id: int) -> None:
        if self.notifications.mark_read(notification_id, owner_id) == 0:
            raise NotFoundError("Notificación no encontrada", code="notification_not_found")

    def mark_all_read(self, owner_id: int) -> int:
        count = self.notifications.mark_all_read(owner_id)
        logger.info("Marked %d notifications read for user %s", count, owner_id)
        return count

    def unread_count(self, owner_id: int) -> int:
        return self.notifications.count_for_user(owner_id, read=False)

    def list_for_user(self, inp: ListNotificationsInput) -> NotificationPage:
        limit = inp.limit if inp.limit is not None else self.page_size
        if inp.page < 1:
            raise ValidationError("La página debe ser mayor o igual a 1", field="page")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"El límite debe estar entre 1 y {MAX_PAGE_SIZE}", field="limit")

        offset = (inp.page - 1) * limit
        items = self.notifications.list_for_user(inp.owner_id, inp.read, limit, offset)
        total = self.notifications.count_for_user(inp.owner_id, read=inp.read)
        return NotificationPage(
            items=items,
            pagination=Pagination(page=inp.page, limit=limit, total=total),
            unread=self.unread_count(inp.owner_id),
        )

    def delete(self, notification_id: int, owner_id: int) -> None:
        if self.notifications.delete(notification_id, owner_id) == 0:
            raise NotFoundError("Notificación no encontrada", code="notification_not_found")

    # --- Helpers ---

    def _publication(self, publication_id: int) -> Publication:
        publication = self.publications.get_by_id(publication_id)
        if publication is None or publication.deleted:
            raise NotFoundError("Publicación no encontrada", code="publication_not_found")
        return publication

    def _display_name(self, user_id: int) -> str:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuario no encontrado", code="user_not_found")
        return user.name
