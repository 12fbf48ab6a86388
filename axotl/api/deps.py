import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from axotl.adapters.auth.crypto import JWTAuthAdapter
from axotl.adapters.clock import SystemClock
from axotl.adapters.dev_email import LoggingMailer
from axotl.adapters.fs.filestore import FileSystemStore
from axotl.adapters.images.pillow_resizer import PillowImageResizer
from axotl.adapters.render.mpl_pdf import MatplotlibPdfBackend
from axotl.adapters.sqlite.gateway import SQLiteGateway
from axotl.adapters.sqlite.repos import (
    SQLiteCommentRepo,
    SQLiteFavoriteRepo,
    SQLiteNotificationRepo,
    SQLitePublicationImageRepo,
    SQLitePublicationRepo,
    SQLitePublicationTypeRepo,
    SQLiteUserRepo,
)
from axotl.components.auth import AccountService, Identity, UserRoleCapability
from axotl.components.engagement import EngagementService
from axotl.components.notifications import NotificationDispatcher
from axotl.components.publications import PublicationLifecycleManager
from axotl.components.render import DocumentRenderer
from axotl.domain.policy import PolicyEngine
from axotl.rules.loader import load_rules
from axotl.rules.models import Rules
from axotl.services.images import ImageUploadService


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("AXOTL_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "axotl.db")
        self.uploads_dir = self.data_dir / "uploads"
        self.rules_path = Path(os.environ.get("AXOTL_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = self.base_dir / "migrations"
        self.env = os.environ.get("AXOTL_ENV", "production")
        self.secret_key = os.environ.get("AXOTL_SECRET_KEY", "dev-secret-unsafe")

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Gateway ---
# Built once by the application lifespan and shared by every request.
_gateway_instance: SQLiteGateway | None = None


def init_gateway(db_path: str) -> SQLiteGateway:
    global _gateway_instance
    _gateway_instance = SQLiteGateway(db_path)
    return _gateway_instance


def close_gateway() -> None:
    global _gateway_instance
    if _gateway_instance is not None:
        _gateway_instance.close()
        _gateway_instance = None


def get_gateway() -> SQLiteGateway:
    if _gateway_instance is None:
        raise RuntimeError("Persistence gateway not initialised")
    return _gateway_instance


# --- Adapters ---
_clock_instance: SystemClock | None = None
_mailer_instance: LoggingMailer | None = None


def get_clock() -> SystemClock:
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_mailer() -> LoggingMailer:
    global _mailer_instance
    if _mailer_instance is None:
        _mailer_instance = LoggingMailer()
    return _mailer_instance


def get_file_store(settings: Settings = Depends(get_settings)) -> FileSystemStore:
    return FileSystemStore(base_path=str(settings.uploads_dir))


def get_auth_adapter(
    settings: Settings = Depends(get_settings), rules: Rules = Depends(get_rules)
) -> JWTAuthAdapter:
    return JWTAuthAdapter(settings.secret_key, rules.auth.token_ttl_minutes)


@lru_cache
def get_pdf_backend() -> MatplotlibPdfBackend:
    return MatplotlibPdfBackend(get_rules().render)


def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules.roles)


def get_upload_service(
    rules: Rules = Depends(get_rules),
    filestore: FileSystemStore = Depends(get_file_store),
) -> ImageUploadService:
    return ImageUploadService(
        filestore, PillowImageResizer(quality=rules.images.jpeg_quality), rules.uploads
    )


# --- Repos ---
def get_user_repo(gateway: SQLiteGateway = Depends(get_gateway)) -> SQLiteUserRepo:
    return SQLiteUserRepo(gateway)


def get_publication_repo(gateway: SQLiteGateway = Depends(get_gateway)) -> SQLitePublicationRepo:
    return SQLitePublicationRepo(gateway)


# --- Component Services ---
def get_role_capability(
    users: SQLiteUserRepo = Depends(get_user_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> UserRoleCapability:
    return UserRoleCapability(users, policy)


def get_notifier(
    gateway: SQLiteGateway = Depends(get_gateway),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
    mailer: LoggingMailer = Depends(get_mailer),
) -> NotificationDispatcher:
    return NotificationDispatcher(
        SQLiteNotificationRepo(gateway),
        SQLiteUserRepo(gateway),
        SQLitePublicationRepo(gateway),
        mailer,
        clock,
        page_size=rules.notifications.page_size,
        notify_by_email_default=rules.notifications.notify_by_email_default,
    )


def get_lifecycle(
    gateway: SQLiteGateway = Depends(get_gateway),
    rules: Rules = Depends(get_rules),
    uploads: ImageUploadService = Depends(get_upload_service),
    notifier: NotificationDispatcher = Depends(get_notifier),
    roles: UserRoleCapability = Depends(get_role_capability),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> PublicationLifecycleManager:
    return PublicationLifecycleManager(
        gateway=gateway,
        publications=SQLitePublicationRepo(gateway),
        types=SQLitePublicationTypeRepo(gateway),
        images=SQLitePublicationImageRepo(gateway),
        uploads=uploads,
        notifier=notifier,
        roles=roles,
        policy=policy,
        images_rules=rules.images,
        clock=clock,
    )


def get_engagement(
    gateway: SQLiteGateway = Depends(get_gateway),
    notifier: NotificationDispatcher = Depends(get_notifier),
    clock: SystemClock = Depends(get_clock),
) -> EngagementService:
    return EngagementService(
        gateway,
        SQLitePublicationRepo(gateway),
        SQLiteCommentRepo(gateway),
        SQLiteFavoriteRepo(gateway),
        notifier,
        clock,
    )


def get_account_service(
    rules: Rules = Depends(get_rules),
    users: SQLiteUserRepo = Depends(get_user_repo),
    auth: JWTAuthAdapter = Depends(get_auth_adapter),
    uploads: ImageUploadService = Depends(get_upload_service),
    roles: UserRoleCapability = Depends(get_role_capability),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> AccountService:
    return AccountService(
        users=users,
        auth=auth,
        uploads=uploads,
        roles=roles,
        policy=policy,
        rules=rules.auth,
        images_rules=rules.images,
        clock=clock,
        default_role=rules.roles.default,
    )


def get_renderer(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    publications: SQLitePublicationRepo = Depends(get_publication_repo),
    filestore: FileSystemStore = Depends(get_file_store),
    backend: MatplotlibPdfBackend = Depends(get_pdf_backend),
) -> DocumentRenderer:
    return DocumentRenderer(
        publications, filestore, backend, rules.render, asset_root=settings.base_dir
    )


# --- Identity ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _request_token(request: Request, token: str | None) -> str | None:
    if token:
        return token
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token.split(" ", 1)[1]
    return None


def get_identity(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    accounts: AccountService = Depends(get_account_service),
) -> Identity:
    """Resolve the caller. Raises AuthError when there is no valid token."""
    return accounts.authenticate(_request_token(request, token))
