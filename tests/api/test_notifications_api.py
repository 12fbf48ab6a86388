"""
Notification inbox over HTTP.
"""

import pytest


@pytest.fixture
def inbox(client, register, published_id) -> dict:
    """Author with a review notice plus two favorites."""
    author = register()
    publication_id = published_id(author)
    for _ in range(2):
        reader = register()
        client.post(f"/api/publications/{publication_id}/favorite", headers=reader["headers"])
    return author


def test_list_with_pagination(client, inbox):
    response = client.get("/api/notifications", params={"limit": 2}, headers=inbox["headers"])
    data = response.json()["data"]

    assert len(data["items"]) == 2
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
    assert data["unread"] == 3
    assert data["items"][0]["type"] == "favorito"


def test_read_filter(client, inbox):
    first = client.get("/api/notifications", headers=inbox["headers"]).json()["data"]["items"][0]
    client.put(f"/api/notifications/{first['id']}/read", headers=inbox["headers"])

    read = client.get("/api/notifications", params={"read": "true"}, headers=inbox["headers"])
    assert [n["id"] for n in read.json()["data"]["items"]] == [first["id"]]
    unread = client.get("/api/notifications/unread-count", headers=inbox["headers"])
    assert unread.json()["data"]["unread"] == 2


def test_read_all(client, inbox):
    response = client.put("/api/notifications/read-all", headers=inbox["headers"])
    assert response.json()["data"] == {"updated": 3}
    unread = client.get("/api/notifications/unread-count", headers=inbox["headers"])
    assert unread.json()["data"]["unread"] == 0


def test_scoped_to_recipient(client, inbox, register):
    notification = client.get("/api/notifications", headers=inbox["headers"]).json()["data"][
        "items"
    ][0]
    stranger = register()

    read = client.put(f"/api/notifications/{notification['id']}/read", headers=stranger["headers"])
    assert read.status_code == 404
    deleted = client.delete(f"/api/notifications/{notification['id']}", headers=stranger["headers"])
    assert deleted.status_code == 404

    own = client.delete(f"/api/notifications/{notification['id']}", headers=inbox["headers"])
    assert own.status_code == 200


def test_limit_bounds(client, inbox):
    response = client.get("/api/notifications", params={"limit": 0}, headers=inbox["headers"])
    assert response.status_code == 400
