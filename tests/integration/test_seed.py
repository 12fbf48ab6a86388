from axotl.adapters.auth.crypto import JWTAuthAdapter
from axotl.adapters.sqlite.gateway import SQLiteGateway
from axotl.adapters.sqlite.repos import SQLiteUserRepo
from axotl.api.deps import Settings
from seed_db import seed


def _settings(tmp_path) -> Settings:
    settings = Settings()
    settings.data_dir = tmp_path / "data"
    settings.db_path = str(settings.data_dir / "axotl.db")
    return settings


def _users(settings):
    return SQLiteUserRepo(SQLiteGateway(settings.db_path))


def test_creates_administrator(tmp_path):
    settings = _settings(tmp_path)
    seed(settings, "admin@example.com", "Cambiame123")

    stored = _users(settings).get_by_email("admin@example.com")
    assert stored.role == "administrador"
    assert JWTAuthAdapter("x").verify_password("Cambiame123", stored.password_hash)


def test_second_run_keeps_password(tmp_path):
    settings = _settings(tmp_path)
    first = seed(settings, "admin@example.com", "Cambiame123")
    again = seed(settings, "admin@example.com", "Otra12345")

    assert again.id == first.id
    stored = _users(settings).get_by_email("admin@example.com")
    assert JWTAuthAdapter("x").verify_password("Cambiame123", stored.password_hash)


def test_promotes_existing_account(tmp_path):
    settings = _settings(tmp_path)
    first = seed(settings, "ana@example.com", "Cambiame123")
    users = _users(settings)
    users.set_role(first.id, "registrado")

    seed(settings, "ana@example.com", "Cambiame123")
    assert users.get_by_email("ana@example.com").role == "administrador"
