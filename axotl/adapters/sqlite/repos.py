"""
SQLite repositories.

Every repository runs its SQL through the shared SQLiteGateway, so calls made
inside ``gateway.transaction()`` commit or roll back together.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any

from axotl.adapters.sqlite.gateway import SQLiteGateway
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
from axotl.domain.errors import ConflictError
from axotl.domain.state import PUBLIC_VISIBILITY_SQL

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def fmt_dt(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


# Extended result codes for a duplicate key; FOREIGN KEY, CHECK and NOT NULL failures differ.
DUPLICATE_KEY_ERRORS = {"SQLITE_CONSTRAINT_PRIMARYKEY", "SQLITE_CONSTRAINT_UNIQUE"}


def is_duplicate_key(e: sqlite3.IntegrityError) -> bool:
    return e.sqlite_errorname in DUPLICATE_KEY_ERRORS


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, gateway: SQLiteGateway):
        self.gateway = gateway


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    def get_by_id(self, user_id: int) -> User | None:
        row = self.gateway.query_one("SELECT * FROM users WHERE id = ?", (user_id,))
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        row = self.gateway.query_one("SELECT * FROM users WHERE email = ?", (email,))
        return self._map_row(row) if row else None

    def create(self, user: User) -> User:
        try:
            _, new_id = self.gateway.execute(
                """
                INSERT INTO users (email, password_hash, name, title, profile_photo, role,
                                   created_at, last_access)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user.email,
                    user.password_hash,
                    user.name,
                    user.title,
                    user.profile_photo,
                    user.role,
                    fmt_dt(user.created_at),
                    fmt_dt(user.last_access),
                ),
            )
        except sqlite3.IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            raise ConflictError(
                "El correo electrónico ya está registrado", code="email_duplicate", field="email"
            ) from e
        return user.model_copy(update={"id": new_id})

    def update_profile(self, user_id: int, name: str, title: str) -> None:
        self.gateway.execute(
            "UPDATE users SET name = ?, title = ? WHERE id = ?", (name, title, user_id)
        )

    def set_profile_photo(self, user_id: int, path: str | None) -> None:
        self.gateway.execute("UPDATE users SET profile_photo = ? WHERE id = ?", (path, user_id))

    def set_role(self, user_id: int, role: str) -> None:
        self.gateway.execute("UPDATE users SET role = ? WHERE id = ?", (role, user_id))

    def touch_last_access(self, user_id: int, when: datetime) -> None:
        self.gateway.execute(
            "UPDATE users SET last_access = ? WHERE id = ?", (fmt_dt(when), user_id)
        )

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            name=row["name"],
            title=row["title"],
            profile_photo=row["profile_photo"],
            role=row["role"],
            created_at=parse_dt(row["created_at"]),
            last_access=parse_dt(row["last_access"]),
        )


# -----------------------------------------------------------------------------
# Publication types
# -----------------------------------------------------------------------------


class SQLitePublicationTypeRepo(SQLiteRepoBase):
    def get_by_id(self, type_id: int) -> PublicationType | None:
        row = self.gateway.query_one("SELECT * FROM publication_types WHERE id = ?", (type_id,))
        return PublicationType(**row) if row else None

    def list_all(self) -> list[PublicationType]:
        rows = self.gateway.query("SELECT * FROM publication_types ORDER BY id")
        return [PublicationType(**r) for r in rows]


# -----------------------------------------------------------------------------
# Publications
# -----------------------------------------------------------------------------

_VIEW_SELECT = """
    SELECT p.*,
           u.name AS author_name,
           u.profile_photo AS author_photo,
           t.name AS type_name,
           (SELECT COUNT(*) FROM favorites f WHERE f.publication_id = p.id) AS total_favorites,
           (SELECT COUNT(*) FROM comments c WHERE c.publication_id = p.id) AS total_comments
    FROM publications p
    JOIN users u ON p.owner_id = u.id
    JOIN publication_types t ON p.type_id = t.id
"""


class SQLitePublicationRepo(SQLiteRepoBase):
    def get_by_id(self, publication_id: int) -> Publication | None:
        row = self.gateway.query_one(
            "SELECT * FROM publications WHERE id = ?", (publication_id,)
        )
        return self._map_row(row) if row else None

    def max_id(self) -> int | None:
        value = self.gateway.scalar("SELECT MAX(id) AS max_id FROM publications")
        return int(value) if value is not None else None

    def insert(self, publication: Publication) -> Publication:
        columns, values = self._columns(publication)
        if publication.id is not None:
            columns = ["id", *columns]
            values = [publication.id, *values]
        placeholders = ", ".join("?" for _ in columns)
        try:
            _, new_id = self.gateway.execute(
                f"INSERT INTO publications ({', '.join(columns)}) VALUES ({placeholders})",
                tuple(values),
            )
        except sqlite3.IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            raise ConflictError(
                f"El identificador {publication.id} ya está en uso", code="id_taken", field="id"
            ) from e
        return publication.model_copy(update={"id": new_id})

    def update(self, publication: Publication) -> Publication:
        columns, values = self._columns(publication)
        assignments = ", ".join(f"{c} = ?" for c in columns)
        self.gateway.execute(
            f"UPDATE publications SET {assignments} WHERE id = ?",
            (*values, publication.id),
        )
        return publication

    def get_view(self, publication_id: int, public_only: bool = True) -> PublicationView | None:
        where = PUBLIC_VISIBILITY_SQL if public_only else "p.deleted = 0"
        row = self.gateway.query_one(
            f"{_VIEW_SELECT} WHERE p.id = ? AND {where}", (publication_id,)
        )
        return self._map_view(row) if row else None

    def list_public(self, limit: int | None = None) -> list[PublicationView]:
        sql = f"{_VIEW_SELECT} WHERE {PUBLIC_VISIBILITY_SQL} ORDER BY p.published_at DESC, p.id DESC"
        params: tuple[Any, ...] = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        return [self._map_view(r) for r in self.gateway.query(sql, params)]

    def list_by_owner(
        self, owner_id: int, state: PublicationState | None = None
    ) -> list[Publication]:
        sql = "SELECT * FROM publications WHERE owner_id = ? AND deleted = 0"
        params: tuple[Any, ...] = (owner_id,)
        if state is not None:
            sql += " AND state = ?"
            params = (owner_id, state)
        sql += " ORDER BY published_at DESC, id DESC"
        return [self._map_row(r) for r in self.gateway.query(sql, params)]

    def list_by_state(self, state: PublicationState) -> list[PublicationView]:
        rows = self.gateway.query(
            f"{_VIEW_SELECT} WHERE p.state = ? AND p.deleted = 0 ORDER BY p.created_at DESC",
            (state,),
        )
        return [self._map_view(r) for r in rows]

    def _columns(self, p: Publication) -> tuple[list[str], list[Any]]:
        data: dict[str, Any] = {
            "owner_id": p.owner_id,
            "type_id": p.type_id,
            "title": p.title,
            "summary": p.summary,
            "content": p.content,
            "references_text": p.references,
            "cover_image_path": p.cover_image_path,
            "state": p.state,
            "is_private": int(p.is_private),
            "deleted": int(p.deleted),
            "deleted_at": fmt_dt(p.deleted_at),
            "review_comment": p.review_comment,
            "reviewer_id": p.reviewer_id,
            "created_at": fmt_dt(p.created_at),
            "updated_at": fmt_dt(p.updated_at),
            "published_at": fmt_dt(p.published_at),
        }
        return list(data.keys()), list(data.values())

    def _fields(self, row: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": row["id"],
            "owner_id": row["owner_id"],
            "type_id": row["type_id"],
            "title": row["title"],
            "summary": row["summary"],
            "content": row["content"],
            "references": row["references_text"],
            "cover_image_path": row["cover_image_path"],
            "state": row["state"],
            "is_private": bool(row["is_private"]),
            "deleted": bool(row["deleted"]),
            "deleted_at": parse_dt(row["deleted_at"]),
            "review_comment": row["review_comment"],
            "reviewer_id": row["reviewer_id"],
            "created_at": parse_dt(row["created_at"]),
            "updated_at": parse_dt(row["updated_at"]),
            "published_at": parse_dt(row["published_at"]),
        }

    def _map_row(self, row: dict[str, Any]) -> Publication:
        return Publication(**self._fields(row))

    def _map_view(self, row: dict[str, Any]) -> PublicationView:
        return PublicationView(
            **self._fields(row),
            author_name=row["author_name"],
            author_photo=row["author_photo"],
            type_name=row["type_name"],
            total_favorites=row["total_favorites"],
            total_comments=row["total_comments"],
        )


# -----------------------------------------------------------------------------
# Publication images
# -----------------------------------------------------------------------------


class SQLitePublicationImageRepo(SQLiteRepoBase):
    def add(self, image: PublicationImage) -> PublicationImage:
        with self.gateway.transaction():
            last = self.gateway.scalar(
                "SELECT MAX(sort_order) AS last_order FROM publication_images "
                "WHERE publication_id = ?",
                (image.publication_id,),
            )
            order = (last or 0) + 1
            _, new_id = self.gateway.execute(
                "INSERT INTO publication_images (publication_id, url, description, sort_order) "
                "VALUES (?, ?, ?, ?)",
                (image.publication_id, image.url, image.description, order),
            )
        return image.model_copy(update={"id": new_id, "order": order})

    def get(self, publication_id: int, image_id: int) -> PublicationImage | None:
        row = self.gateway.query_one(
            "SELECT * FROM publication_images WHERE publication_id = ? AND id = ?",
            (publication_id, image_id),
        )
        return self._map_row(row) if row else None

    def delete(self, image_id: int) -> None:
        self.gateway.execute("DELETE FROM publication_images WHERE id = ?", (image_id,))

    def list_for_publication(self, publication_id: int) -> list[PublicationImage]:
        rows = self.gateway.query(
            "SELECT * FROM publication_images WHERE publication_id = ? ORDER BY sort_order ASC",
            (publication_id,),
        )
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> PublicationImage:
        return PublicationImage(
            id=row["id"],
            publication_id=row["publication_id"],
            url=row["url"],
            description=row["description"],
            order=row["sort_order"],
        )


# -----------------------------------------------------------------------------
# Comments
# -----------------------------------------------------------------------------


class SQLiteCommentRepo(SQLiteRepoBase):
    def add(self, comment: Comment) -> Comment:
        _, new_id = self.gateway.execute(
            "INSERT INTO comments (publication_id, author_id, content, created_at) "
            "VALUES (?, ?, ?, ?)",
            (comment.publication_id, comment.author_id, comment.content,
             fmt_dt(comment.created_at)),
        )
        return comment.model_copy(update={"id": new_id})

    def get_by_id(self, comment_id: int) -> Comment | None:
        row = self.gateway.query_one(
            "SELECT c.*, u.name AS author_name FROM comments c "
            "JOIN users u ON c.author_id = u.id WHERE c.id = ?",
            (comment_id,),
        )
        return self._map_row(row) if row else None

    def delete(self, comment_id: int) -> None:
        self.gateway.execute("DELETE FROM comments WHERE id = ?", (comment_id,))

    def list_for_publication(self, publication_id: int) -> list[Comment]:
        rows = self.gateway.query(
            "SELECT c.*, u.name AS author_name FROM comments c "
            "JOIN users u ON c.author_id = u.id "
            "WHERE c.publication_id = ? ORDER BY c.created_at ASC, c.id ASC",
            (publication_id,),
        )
        return [self._map_row(r) for r in rows]

    def count_for_publication(self, publication_id: int) -> int:
        return int(
            self.gateway.scalar(
                "SELECT COUNT(*) AS total FROM comments WHERE publication_id = ?",
                (publication_id,),
            )
        )

    def _map_row(self, row: dict[str, Any]) -> Comment:
        return Comment(
            id=row["id"],
            publication_id=row["publication_id"],
            author_id=row["author_id"],
            content=row["content"],
            author_name=row["author_name"],
            created_at=parse_dt(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# Favorites
# -----------------------------------------------------------------------------


class SQLiteFavoriteRepo(SQLiteRepoBase):
    def add(self, user_id: int, publication_id: int, when: datetime) -> bool:
        try:
            self.gateway.execute(
                "INSERT INTO favorites (user_id, publication_id, created_at) VALUES (?, ?, ?)",
                (user_id, publication_id, fmt_dt(when)),
            )
        except sqlite3.IntegrityError:
            # UNIQUE(user_id, publication_id): already favorited
            if self.exists(user_id, publication_id):
                return False
            raise
        return True

    def remove(self, user_id: int, publication_id: int) -> bool:
        affected, _ = self.gateway.execute(
            "DELETE FROM favorites WHERE user_id = ? AND publication_id = ?",
            (user_id, publication_id),
        )
        return affected > 0

    def exists(self, user_id: int, publication_id: int) -> bool:
        row = self.gateway.query_one(
            "SELECT 1 AS found FROM favorites WHERE user_id = ? AND publication_id = ?",
            (user_id, publication_id),
        )
        return row is not None

    def count_for_publication(self, publication_id: int) -> int:
        return int(
            self.gateway.scalar(
                "SELECT COUNT(*) AS total FROM favorites WHERE publication_id = ?",
                (publication_id,),
            )
        )


# -----------------------------------------------------------------------------
# Notifications
# -----------------------------------------------------------------------------


class SQLiteNotificationRepo(SQLiteRepoBase):
    def add(self, notification: Notification) -> Notification:
        n = notification
        _, new_id = self.gateway.execute(
            """
            INSERT INTO notifications (recipient_id, origin_id, type, reference_id,
                                       reference_type, content, is_read, notify_by_email,
                                       created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                n.recipient_id,
                n.origin_id,
                n.type,
                n.reference_id,
                n.reference_type,
                n.content,
                int(n.read),
                int(n.notify_by_email),
                fmt_dt(n.created_at),
            ),
        )
        return n.model_copy(update={"id": new_id})

    def mark_read(self, notification_id: int, recipient_id: int) -> int:
        affected, _ = self.gateway.execute(
            "UPDATE notifications SET is_read = 1 WHERE id = ? AND recipient_id = ?",
            (notification_id, recipient_id),
        )
        return affected

    def mark_all_read(self, recipient_id: int) -> int:
        affected, _ = self.gateway.execute(
            "UPDATE notifications SET is_read = 1 WHERE recipient_id = ? AND is_read = 0",
            (recipient_id,),
        )
        return affected

    def list_for_user(
        self, recipient_id: int, read: bool | None, limit: int, offset: int
    ) -> list[Notification]:
        sql = (
            "SELECT n.*, u.name AS origin_name, u.profile_photo AS origin_photo "
            "FROM notifications n LEFT JOIN users u ON n.origin_id = u.id "
            "WHERE n.recipient_id = ?"
        )
        params: list[Any] = [recipient_id]
        if read is not None:
            sql += " AND n.is_read = ?"
            params.append(int(read))
        sql += " ORDER BY n.created_at DESC, n.id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        return [self._map_row(r) for r in self.gateway.query(sql, tuple(params))]

    def count_for_user(self, recipient_id: int, read: bool | None = None) -> int:
        sql = "SELECT COUNT(*) AS total FROM notifications WHERE recipient_id = ?"
        params: tuple[Any, ...] = (recipient_id,)
        if read is not None:
            sql += " AND is_read = ?"
            params = (recipient_id, int(read))
        return int(self.gateway.scalar(sql, params))

    def delete(self, notification_id: int, recipient_id: int) -> int:
        affected, _ = self.gateway.execute(
            "DELETE FROM notifications WHERE id = ? AND recipient_id = ?",
            (notification_id, recipient_id),
        )
        return affected

    def _map_row(self, row: dict[str, Any]) -> Notification:
        return Notification(
            id=row["id"],
            recipient_id=row["recipient_id"],
            origin_id=row["origin_id"],
            type=row["type"],
            reference_id=row["reference_id"],
            reference_type=row["reference_type"],
            content=row["content"],
            read=bool(row["is_read"]),
            notify_by_email=bool(row["notify_by_email"]),
            origin_name=row.get("origin_name"),
            origin_photo=row.get("origin_photo"),
            created_at=parse_dt(row["created_at"]),
        )
