import io
from datetime import UTC, datetime
from pathlib import Path

import pytest
from PIL import Image

from axotl.adapters.auth.crypto import JWTAuthAdapter
from axotl.adapters.clock import FixedClock
from axotl.adapters.dev_email import LoggingMailer
from axotl.adapters.fs.filestore import FileSystemStore
from axotl.adapters.images.pillow_resizer import PillowImageResizer
from axotl.adapters.sqlite.gateway import SQLiteGateway
from axotl.adapters.sqlite.migrator import SQLiteMigrator
from axotl.adapters.sqlite.repos import (
    SQLiteCommentRepo,
    SQLiteFavoriteRepo,
    SQLiteNotificationRepo,
    SQLitePublicationImageRepo,
    SQLitePublicationRepo,
    SQLitePublicationTypeRepo,
    SQLiteUserRepo,
)
from axotl.components.auth import AccountService, UserRoleCapability
from axotl.components.engagement import EngagementService
from axotl.components.notifications import NotificationDispatcher
from axotl.components.publications import (
    CreatePublicationInput,
    PublicationFields,
    PublicationLifecycleManager,
    ReviewDecisionInput,
)
from axotl.domain.entities import Publication, User
from axotl.domain.policy import PolicyEngine
from axotl.domain.uploads import UploadedFile
from axotl.rules.loader import load_rules
from axotl.rules.models import Rules
from axotl.services.images import ImageUploadService

PROJECT_ROOT = Path(__file__).resolve().parent.parent
RULES_PATH = PROJECT_ROOT / "rules.yaml"
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"

ARTICLE_TYPE = 1


# --- Infrastructure ---


@pytest.fixture
def rules() -> Rules:
    return load_rules(RULES_PATH)


@pytest.fixture
def db_path(tmp_path):
    """Path of a freshly migrated SQLite database."""
    path = str(tmp_path / "axotl.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path


@pytest.fixture
def gateway(db_path):
    gw = SQLiteGateway(db_path)
    yield gw
    gw.close()


@pytest.fixture
def filestore(tmp_path):
    return FileSystemStore(str(tmp_path / "uploads"))


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 2, 10, 0, tzinfo=UTC))


@pytest.fixture
def mailer():
    return LoggingMailer()


@pytest.fixture
def policy(rules):
    return PolicyEngine(rules.roles)


@pytest.fixture
def uploads(filestore, rules):
    return ImageUploadService(
        filestore, PillowImageResizer(quality=rules.images.jpeg_quality), rules.uploads
    )


# --- Repos ---


@pytest.fixture
def user_repo(gateway):
    return SQLiteUserRepo(gateway)


@pytest.fixture
def publication_repo(gateway):
    return SQLitePublicationRepo(gateway)


@pytest.fixture
def type_repo(gateway):
    return SQLitePublicationTypeRepo(gateway)


@pytest.fixture
def image_repo(gateway):
    return SQLitePublicationImageRepo(gateway)


@pytest.fixture
def comment_repo(gateway):
    return SQLiteCommentRepo(gateway)


@pytest.fixture
def favorite_repo(gateway):
    return SQLiteFavoriteRepo(gateway)


@pytest.fixture
def notification_repo(gateway):
    return SQLiteNotificationRepo(gateway)


# --- Services ---


@pytest.fixture
def roles(user_repo, policy):
    return UserRoleCapability(user_repo, policy)


@pytest.fixture
def notifier(notification_repo, user_repo, publication_repo, mailer, clock):
    return NotificationDispatcher(notification_repo, user_repo, publication_repo, mailer, clock)


@pytest.fixture
def lifecycle(
    gateway, publication_repo, type_repo, image_repo, uploads, notifier, roles, policy, rules, clock
):
    return PublicationLifecycleManager(
        gateway=gateway,
        publications=publication_repo,
        types=type_repo,
        images=image_repo,
        uploads=uploads,
        notifier=notifier,
        roles=roles,
        policy=policy,
        images_rules=rules.images,
        clock=clock,
    )


@pytest.fixture
def engagement(gateway, publication_repo, comment_repo, favorite_repo, notifier, clock):
    return EngagementService(
        gateway, publication_repo, comment_repo, favorite_repo, notifier, clock
    )


@pytest.fixture
def auth_adapter(rules):
    return JWTAuthAdapter("test-secret", rules.auth.token_ttl_minutes)


@pytest.fixture
def accounts(user_repo, auth_adapter, uploads, roles, policy, rules, clock):
    return AccountService(
        users=user_repo,
        auth=auth_adapter,
        uploads=uploads,
        roles=roles,
        policy=policy,
        rules=rules.auth,
        images_rules=rules.images,
        clock=clock,
        default_role=rules.roles.default,
    )


# --- Factories ---


@pytest.fixture
def make_user(user_repo, clock):
    counter = {"n": 0}

    def _make(name: str | None = None, role: str = "registrado", email: str | None = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        return user_repo.create(
            User(
                email=email or f"user{n}@example.com",
                name=name or f"Usuario {n}",
                role=role,  # type: ignore[arg-type]
                password_hash="hash",
                created_at=clock.now(),
            )
        )

    return _make


def _image_bytes(fmt: str = "PNG", size: tuple[int, int] = (64, 48), color: str = "red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Encoded image bytes; make_image(fmt="JPEG", size=(w, h))."""
    return _image_bytes


@pytest.fixture
def png_upload():
    return UploadedFile(filename="portada.png", content_type="image/png", data=_image_bytes())


@pytest.fixture
def jpeg_upload():
    return UploadedFile(
        filename="foto.jpg", content_type="image/jpeg", data=_image_bytes("JPEG", color="blue")
    )


@pytest.fixture
def publish(lifecycle, make_user, png_upload):
    """Create a publicly visible publication: submitted, approved by a moderator, public."""
    reviewer: dict[str, User] = {}

    def _publish(owner: User, title: str = "Sobre el ajolote", **fields) -> Publication:
        if "moderator" not in reviewer:
            reviewer["moderator"] = make_user(name="Moderadora", role="moderador")
        submitted = lifecycle.create(
            CreatePublicationInput(
                owner_id=owner.id,
                type_id=ARTICLE_TYPE,
                fields=PublicationFields(title=title, is_private=False, **fields),
                submit=True,
                cover=png_upload,
            )
        )
        return lifecycle.review(
            ReviewDecisionInput(
                reviewer_id=reviewer["moderator"].id,
                publication_id=submitted.id,
                decision="publicado",
            )
        )

    return _publish
