from datetime import datetime
from typing import Protocol

from axotl.domain.entities import (
    Comment,
    Notification,
    Publication,
    PublicationImage,
    PublicationState,
    PublicationType,
    PublicationView,
    User,
)


class UserRepoPort(Protocol):
    def get_by_id(self, user_id: int) -> User | None: ...

    def get_by_email(self, email: str) -> User | None: ...

    def create(self, user: User) -> User:
        """Insert a user. Raises ConflictError on duplicate email."""
        ...

    def update_profile(self, user_id: int, name: str, title: str) -> None: ...

    def set_profile_photo(self, user_id: int, path: str | None) -> None: ...

    def set_role(self, user_id: int, role: str) -> None: ...

    def touch_last_access(self, user_id: int, when: datetime) -> None: ...


class PublicationTypeRepoPort(Protocol):
    def get_by_id(self, type_id: int) -> PublicationType | None: ...

    def list_all(self) -> list[PublicationType]: ...


class PublicationRepoPort(Protocol):
    def get_by_id(self, publication_id: int) -> Publication | None:
        """Get a publication regardless of its deleted flag."""
        ...

    def max_id(self) -> int | None: ...

    def insert(self, publication: Publication) -> Publication:
        """Insert; honours an explicit id when one is set."""
        ...

    def update(self, publication: Publication) -> Publication: ...

    def get_view(self, publication_id: int, public_only: bool = True) -> PublicationView | None:
        """Joined read. public_only applies the visibility predicate, else only deleted=0."""
        ...

    def list_public(self, limit: int | None = None) -> list[PublicationView]:
        """Publicly visible publications, newest publication date first."""
        ...

    def list_by_owner(self, owner_id: int, state: PublicationState | None = None) -> list[Publication]:
        ...

    def list_by_state(self, state: PublicationState) -> list[PublicationView]: ...


class CommentRepoPort(Protocol):
    def add(self, comment: Comment) -> Comment: ...

    def get_by_id(self, comment_id: int) -> Comment | None: ...

    def delete(self, comment_id: int) -> None: ...

    def list_for_publication(self, publication_id: int) -> list[Comment]: ...

    def count_for_publication(self, publication_id: int) -> int: ...


class FavoriteRepoPort(Protocol):
    def add(self, user_id: int, publication_id: int, when: datetime) -> bool:
        """Insert the pair. Returns False if it already existed."""
        ...

    def remove(self, user_id: int, publication_id: int) -> bool:
        """Delete the pair. Returns False if there was nothing to delete."""
        ...

    def exists(self, user_id: int, publication_id: int) -> bool: ...

    def count_for_publication(self, publication_id: int) -> int: ...


class NotificationRepoPort(Protocol):
    def add(self, notification: Notification) -> Notification: ...

    def mark_read(self, notification_id: int, recipient_id: int) -> int: ...

    def mark_all_read(self, recipient_id: int) -> int: ...

    def list_for_user(
        self, recipient_id: int, read: bool | None, limit: int, offset: int
    ) -> list[Notification]: ...

    def count_for_user(self, recipient_id: int, read: bool | None = None) -> int: ...

    def delete(self, notification_id: int, recipient_id: int) -> int: ...


class PublicationImageRepoPort(Protocol):
    def add(self, image: PublicationImage) -> PublicationImage:
        """Insert with order = max(order)+1 for the publication."""
        ...

    def get(self, publication_id: int, image_id: int) -> PublicationImage | None: ...

    def delete(self, image_id: int) -> None: ...

    def list_for_publication(self, publication_id: int) -> list[PublicationImage]: ...
