"""
Route handlers call the sqlite gateway, Pillow and the file store directly,
so they are plain functions that FastAPI runs in its threadpool.
"""

import inspect

from fastapi.routing import APIRoute

from axotl.api.main import app


def _api_routes() -> list[APIRoute]:
    return [r for r in app.routes if isinstance(r, APIRoute) and r.path.startswith("/api")]


def test_handlers_are_sync():
    async_handlers = [
        f"{sorted(r.methods)} {r.path}" for r in _api_routes() if inspect.iscoroutinefunction(r.endpoint)
    ]
    assert async_handlers == []


def test_upload_routes_are_covered():
    paths = {r.path for r in _api_routes()}
    assert "/api/editor/publications/{publication_id}/images" in paths
    assert "/api/users/{user_id}/photo" in paths
