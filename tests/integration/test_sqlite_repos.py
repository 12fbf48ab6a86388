import sqlite3
from datetime import UTC, datetime, timedelta

import pytest

from axotl.domain.entities import Comment, Notification, Publication, PublicationImage, User
from axotl.domain.errors import ConflictError

NOW = datetime(2026, 3, 2, 10, 0, tzinfo=UTC)


@pytest.fixture
def owner(make_user):
    return make_user(name="Ana")


def _publication(owner_id: int, **overrides) -> Publication:
    data = dict(owner_id=owner_id, type_id=1, title="Ajolote", created_at=NOW, updated_at=NOW)
    data.update(overrides)
    return Publication(**data)


# --- Users ---


class TestUserRepo:
    def test_create_and_fetch(self, user_repo):
        created = user_repo.create(
            User(email="a@b.com", password_hash="h", name="a", created_at=NOW)
        )
        assert created.id is not None
        assert user_repo.get_by_email("a@b.com") == created
        assert user_repo.get_by_id(created.id).created_at == NOW

    def test_duplicate_email(self, user_repo):
        user_repo.create(User(email="a@b.com", password_hash="h", name="a"))
        with pytest.raises(ConflictError) as exc:
            user_repo.create(User(email="a@b.com", password_hash="h", name="b"))
        assert exc.value.code == "email_duplicate"

    def test_updates(self, user_repo, owner):
        user_repo.update_profile(owner.id, "Ana Luz", "Bióloga")
        user_repo.set_profile_photo(owner.id, "perfil/x.jpg")
        user_repo.set_role(owner.id, "moderador")
        user_repo.touch_last_access(owner.id, NOW)

        stored = user_repo.get_by_id(owner.id)
        assert (stored.name, stored.title, stored.profile_photo, stored.role) == (
            "Ana Luz",
            "Bióloga",
            "perfil/x.jpg",
            "moderador",
        )
        assert stored.last_access == NOW


# --- Publications ---


class TestPublicationRepo:
    def test_insert_assigns_id(self, publication_repo, owner):
        p = publication_repo.insert(_publication(owner.id, references="Smith 2020"))
        stored = publication_repo.get_by_id(p.id)
        assert stored == p
        assert stored.references == "Smith 2020"

    def test_insert_with_explicit_id(self, publication_repo, owner):
        publication_repo.insert(_publication(owner.id, id=42))
        assert publication_repo.max_id() == 42

    def test_explicit_id_taken(self, publication_repo, owner):
        publication_repo.insert(_publication(owner.id, id=5))
        with pytest.raises(ConflictError) as exc:
            publication_repo.insert(_publication(owner.id, id=5))
        assert exc.value.code == "id_taken"

    @pytest.mark.parametrize("overrides", [{"type_id": 999}, {"owner_id": 999}, {"state": "archivado"}])
    def test_other_integrity_errors_are_not_id_taken(self, publication_repo, owner, overrides):
        publication = _publication(owner.id, id=7).model_copy(update=overrides)
        with pytest.raises(sqlite3.IntegrityError):
            publication_repo.insert(publication)
        assert publication_repo.get_by_id(7) is None

    def test_max_id_on_empty_table(self, publication_repo):
        assert publication_repo.max_id() is None

    def test_update_round_trip(self, publication_repo, owner):
        p = publication_repo.insert(_publication(owner.id))
        publication_repo.update(
            p.model_copy(update={"state": "publicado", "is_private": False, "published_at": NOW})
        )
        stored = publication_repo.get_by_id(p.id)
        assert (stored.state, stored.is_private, stored.published_at) == ("publicado", False, NOW)

    def test_view_joins_names_and_totals(
        self, publication_repo, favorite_repo, comment_repo, owner, make_user
    ):
        reader = make_user(name="Luis")
        p = publication_repo.insert(
            _publication(owner.id, state="publicado", is_private=False, published_at=NOW)
        )
        favorite_repo.add(reader.id, p.id, NOW)
        comment_repo.add(Comment(publication_id=p.id, author_id=reader.id, content="hola"))

        view = publication_repo.get_view(p.id)
        assert (view.author_name, view.type_name) == ("Ana", "Artículo")
        assert (view.total_favorites, view.total_comments) == (1, 1)

    def test_list_public_newest_first(self, publication_repo, owner):
        ids = [
            publication_repo.insert(
                _publication(
                    owner.id,
                    state="publicado",
                    is_private=False,
                    published_at=NOW + timedelta(days=i),
                )
            ).id
            for i in range(3)
        ]
        assert [p.id for p in publication_repo.list_public()] == ids[::-1]
        assert len(publication_repo.list_public(limit=2)) == 2

    def test_list_by_owner_filters(self, publication_repo, owner, make_user):
        other = make_user()
        draft = publication_repo.insert(_publication(owner.id))
        pending = publication_repo.insert(_publication(owner.id, state="en_revision"))
        publication_repo.insert(_publication(owner.id, deleted=True, deleted_at=NOW))
        publication_repo.insert(_publication(other.id))

        assert {p.id for p in publication_repo.list_by_owner(owner.id)} == {draft.id, pending.id}
        assert [p.id for p in publication_repo.list_by_owner(owner.id, "en_revision")] == [
            pending.id
        ]
        assert [p.id for p in publication_repo.list_by_state("en_revision")] == [pending.id]


# --- Images ---


class TestImageRepo:
    def test_order_is_sequential(self, image_repo, publication_repo, owner):
        p = publication_repo.insert(_publication(owner.id))
        first = image_repo.add(PublicationImage(publication_id=p.id, url="imagenes/a.png"))
        second = image_repo.add(PublicationImage(publication_id=p.id, url="imagenes/b.png"))

        assert (first.order, second.order) == (1, 2)
        assert [i.url for i in image_repo.list_for_publication(p.id)] == [
            "imagenes/a.png",
            "imagenes/b.png",
        ]

    def test_get_is_scoped_to_publication(self, image_repo, publication_repo, owner):
        p = publication_repo.insert(_publication(owner.id))
        q = publication_repo.insert(_publication(owner.id))
        image = image_repo.add(PublicationImage(publication_id=p.id, url="imagenes/a.png"))

        assert image_repo.get(q.id, image.id) is None
        image_repo.delete(image.id)
        assert image_repo.get(p.id, image.id) is None


# --- Favorites ---


class TestFavoriteRepo:
    def test_add_is_idempotent(self, favorite_repo, publication_repo, owner):
        p = publication_repo.insert(_publication(owner.id))
        assert favorite_repo.add(owner.id, p.id, NOW) is True
        assert favorite_repo.add(owner.id, p.id, NOW) is False
        assert favorite_repo.count_for_publication(p.id) == 1

    def test_remove(self, favorite_repo, publication_repo, owner):
        p = publication_repo.insert(_publication(owner.id))
        favorite_repo.add(owner.id, p.id, NOW)
        assert favorite_repo.remove(owner.id, p.id) is True
        assert favorite_repo.remove(owner.id, p.id) is False
        assert favorite_repo.exists(owner.id, p.id) is False


# --- Notifications ---


class TestNotificationRepo:
    @pytest.fixture
    def rows(self, notification_repo, owner, make_user):
        actor = make_user(name="Luis")
        created = [
            notification_repo.add(
                Notification(
                    recipient_id=owner.id,
                    origin_id=actor.id,
                    type="favorito",
                    reference_id=1,
                    content=f"n{i}",
                    created_at=NOW + timedelta(minutes=i),
                )
            )
            for i in range(3)
        ]
        return created

    def test_newest_first_with_origin(self, notification_repo, owner, rows):
        listed = notification_repo.list_for_user(owner.id, None, 10, 0)
        assert [n.content for n in listed] == ["n2", "n1", "n0"]
        assert listed[0].origin_name == "Luis"

    def test_paging_and_read_filter(self, notification_repo, owner, rows):
        notification_repo.mark_read(rows[0].id, owner.id)

        assert [n.content for n in notification_repo.list_for_user(owner.id, None, 1, 1)] == ["n1"]
        assert notification_repo.count_for_user(owner.id, read=False) == 2
        assert [n.content for n in notification_repo.list_for_user(owner.id, True, 10, 0)] == ["n0"]

    def test_scoped_to_recipient(self, notification_repo, owner, rows, make_user):
        stranger = make_user()
        assert notification_repo.mark_read(rows[0].id, stranger.id) == 0
        assert notification_repo.delete(rows[0].id, stranger.id) == 0
        assert notification_repo.mark_all_read(owner.id) == 3
        assert notification_repo.delete(rows[0].id, owner.id) == 1
        assert notification_repo.count_for_user(owner.id) == 2
