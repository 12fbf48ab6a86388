"""
SQL migrations for the sqlite store.

Files are named NNNN_description.sql and applied in order. Only the part
before a "-- Down" marker runs. Each file is applied in its own
transaction together with its ledger row, so a failing script leaves
neither tables nor a record behind.
"""

import hashlib
import logging
import re
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATION_NAME = re.compile(r"^\d{4}_[A-Za-z0-9_]+\.sql$")
DOWN_MARKER = "-- Down"


@dataclass(frozen=True)
class Migration:
    filename: str
    up_sql: str
    checksum: str


def load_migration(path: Path) -> Migration:
    content = path.read_text(encoding="utf-8")
    up_sql = content.split(DOWN_MARKER, 1)[0]
    return Migration(
        filename=path.name,
        up_sql=up_sql,
        checksum=hashlib.sha256(up_sql.encode("utf-8")).hexdigest(),
    )


def discover_migrations(migrations_dir: Path) -> list[Migration]:
    """Migration files in apply order. Other .sql files are skipped with a warning."""
    migrations = []
    for path in sorted(migrations_dir.glob("*.sql")):
        if not MIGRATION_NAME.match(path.name):
            logger.warning("Skipping %s: migration files are named NNNN_name.sql", path.name)
            continue
        migrations.append(load_migration(path))
    return migrations


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        # autocommit: transactions are opened explicitly per migration
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                filename TEXT PRIMARY KEY,
                checksum TEXT NOT NULL,
                applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        return conn

    def _applied(self, conn: sqlite3.Connection) -> dict[str, str]:
        return dict(conn.execute("SELECT filename, checksum FROM _migrations").fetchall())

    def pending(self) -> list[str]:
        conn = self._connect()
        try:
            applied = self._applied(conn)
        finally:
            conn.close()
        return [m.filename for m in discover_migrations(self.migrations_dir) if m.filename not in applied]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        conn = self._connect()
        applied_now: list[str] = []
        try:
            applied = self._applied(conn)
            for migration in discover_migrations(self.migrations_dir):
                recorded = applied.get(migration.filename)
                if recorded is None:
                    logger.info("Applying migration: %s", migration.filename)
                    self._apply(conn, migration)
                    applied_now.append(migration.filename)
                elif recorded != migration.checksum:
                    logger.warning("Migration %s changed after it was applied", migration.filename)
        finally:
            conn.close()
        return applied_now

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        try:
            # executescript keeps the transaction opened by the leading BEGIN
            conn.executescript(f"BEGIN IMMEDIATE;\n{migration.up_sql}\n;")
            conn.execute(
                "INSERT INTO _migrations (filename, checksum) VALUES (?, ?)",
                (migration.filename, migration.checksum),
            )
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise RuntimeError(f"Migration {migration.filename} failed: {e}") from e
