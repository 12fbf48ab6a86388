"""
Bootstrap a local database: apply migrations and create the administrator.

Role changes are admin-only, so a fresh install needs one administrador
account created out of band. Credentials come from the environment:
AXOTL_ADMIN_EMAIL and AXOTL_ADMIN_PASSWORD (defaults are for local use only).
"""

import logging
import os

from axotl.adapters.auth.crypto import JWTAuthAdapter
from axotl.adapters.clock import SystemClock
from axotl.adapters.sqlite.gateway import SQLiteGateway
from axotl.adapters.sqlite.migrator import SQLiteMigrator
from axotl.adapters.sqlite.repos import SQLiteUserRepo
from axotl.api.deps import Settings
from axotl.domain.entities import User

logger = logging.getLogger(__name__)


def seed(settings: Settings, email: str, password: str) -> User:
    """Create the administrator if missing, or promote an existing account."""
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    if applied:
        logger.info("Applied migrations: %s", ", ".join(applied))

    gateway = SQLiteGateway(settings.db_path)
    try:
        users = SQLiteUserRepo(gateway)
        existing = users.get_by_email(email)
        if existing is not None:
            if existing.role != "administrador":
                users.set_role(existing.id or 0, "administrador")
                logger.info("Promoted %s to administrador", email)
            else:
                logger.info("Administrator %s already exists", email)
            return existing.model_copy(update={"role": "administrador"})

        now = SystemClock().now()
        admin = users.create(
            User(
                email=email,
                name="Administrador",
                title="Administración",
                role="administrador",
                password_hash=JWTAuthAdapter(settings.secret_key).hash_password(password),
                created_at=now,
            )
        )
        logger.info("Created administrator %s", email)
        return admin
    finally:
        gateway.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    seed(
        Settings(),
        os.environ.get("AXOTL_ADMIN_EMAIL", "admin@example.com"),
        os.environ.get("AXOTL_ADMIN_PASSWORD", "Cambiame123"),
    )
