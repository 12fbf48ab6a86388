"""
API test wiring: the real app with persistence and clocks swapped for
test instances through dependency overrides. The lifespan is not run.
"""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from axotl.api import deps
from axotl.api.main import app


class _TestSettings(deps.Settings):
    def __init__(self, data_dir: Path) -> None:
        super().__init__()
        self.data_dir = data_dir
        self.db_path = str(data_dir / "axotl.db")
        self.uploads_dir = data_dir / "uploads"
        self.secret_key = "test-secret"


@pytest.fixture
def client(tmp_path, gateway, clock, mailer) -> Iterator[TestClient]:
    settings = _TestSettings(tmp_path)
    app.dependency_overrides[deps.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_gateway] = lambda: gateway
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client, user_repo) -> Callable[..., dict]:
    """Register through the API; returns {"id", "headers"}. Cookies are dropped."""
    counter = {"n": 0}

    def _register(role: str = "registrado", email: str | None = None) -> dict:
        counter["n"] += 1
        response = client.post(
            "/api/auth/register",
            json={"email": email or f"user{counter['n']}@example.com", "password": "Abcdef12"},
        )
        assert response.status_code == 201, response.text
        client.cookies.clear()
        data = response.json()["data"]
        if role != "registrado":
            user_repo.set_role(data["user"]["id"], role)
        return {
            "id": data["user"]["id"],
            "headers": {"Authorization": f"Bearer {data['access_token']}"},
        }

    return _register


@pytest.fixture
def cover_file(make_image) -> dict:
    return {"cover_image": ("portada.png", make_image(), "image/png")}


@pytest.fixture
def published_id(client, register, cover_file) -> Callable[..., int]:
    """Submit through the editor API and approve as a moderator."""

    def _published(author: dict, **form) -> int:
        data = {
            "title": "Sobre el ajolote",
            "type_id": "1",
            "submit": "true",
            "is_private": "false",
        }
        data.update(form)
        response = client.post(
            "/api/editor/publications", data=data, files=cover_file, headers=author["headers"]
        )
        assert response.status_code == 201, response.text
        publication_id = response.json()["data"]["id"]

        moderator = register(role="moderador")
        review = client.post(
            f"/api/management/publications/{publication_id}/review",
            json={"decision": "publicado"},
            headers=moderator["headers"],
        )
        assert review.status_code == 200, review.text
        return publication_id

    return _published
