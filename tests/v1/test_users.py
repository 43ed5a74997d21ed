"""Tests for profile edits and account deletion."""

import pytest
from fastapi import status

from asirnet.api.v1.dependencies import get_stores
from asirnet.core.errors import StorageUnavailable
from asirnet.stores.base import StoreBundle
from asirnet.stores.memory import (
    MemoryContentStore,
    MemoryDatabase,
    MemoryIdentityStore,
    MemoryInteractionStore,
)


def _create_posts(client, user, count=3):
    return [
        client.post("/posts", json={"content": f"post {i}"}, headers=user["headers"]).json()
        for i in range(count)
    ]


def test_list_users_hides_credentials(client, alice, bob) -> None:
    r = client.get("/users")
    assert r.status_code == status.HTTP_200_OK
    users = r.json()
    assert [u["username"] for u in users] == ["alice", "bob"]
    assert all(set(u) == {"id", "username", "bio", "avatar"} for u in users)


def test_edit_profile_updates_every_post(client, alice, bob) -> None:
    _create_posts(client, alice)
    _create_posts(client, bob, count=1)

    r = client.put("/editprofile", json={"username": "alicia"}, headers=alice["headers"])
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["user"]["username"] == "alicia"
    assert r.json()["message"]

    posts = client.get("/posts").json()
    by_author = {p["author_id"]: p["username"] for p in posts}
    assert by_author[alice["user"]["id"]] == "alicia"
    assert by_author[bob["user"]["id"]] == "bob"
    assert sum(1 for p in posts if p["username"] == "alicia") == 3


def test_edit_profile_password_allows_new_login(client, alice) -> None:
    r = client.put("/editprofile", json={"password": "pw-new"}, headers=alice["headers"])
    assert r.status_code == status.HTTP_200_OK

    assert client.post("/login", json={"username": "alice", "password": "pw1"}).status_code == 401
    assert client.post("/login", json={"username": "alice", "password": "pw-new"}).status_code == 200


def test_edit_profile_duplicate_username(client, alice, bob) -> None:
    r = client.put("/editprofile", json={"username": "bob"}, headers=alice["headers"])
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert client.get("/me", headers=alice["headers"]).json()["username"] == "alice"


def test_edit_profile_rejects_unknown_fields(client, alice) -> None:
    r = client.put("/editprofile", json={"email": "a@example.com"}, headers=alice["headers"])
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_edit_profile_requires_auth(client) -> None:
    r = client.put("/editprofile", json={"bio": "x"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_update_other_user_forbidden(client, alice, bob) -> None:
    r = client.put(f"/users/{bob['user']['id']}", json={"bio": "hacked"}, headers=alice["headers"])
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = client.put(f"/users/{alice['user']['id']}", json={"bio": "mine"}, headers=alice["headers"])
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["user"]["bio"] == "mine"


def test_delete_user_cascades(client, alice, bob) -> None:
    posts = _create_posts(client, alice)
    bob_post = _create_posts(client, bob, count=1)[0]
    for post in posts:
        client.post("/react", json={"post_id": post["id"]}, headers=bob["headers"])
    client.post("/react", json={"post_id": bob_post["id"]}, headers=alice["headers"])

    r = client.delete("/deleteuser/alice", headers=alice["headers"])
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"message": "Deleted", "posts_deleted": 3, "interactions_deleted": 3}

    remaining = client.get("/posts").json()
    assert [p["id"] for p in remaining] == [bob_post["id"]]
    for post in posts:
        counts = client.get("/QuanOfReact", params={"postId": post["id"]}).json()
        assert counts["likes"] == 0
    assert [u["username"] for u in client.get("/users").json()] == ["bob"]


def test_delete_unknown_username(client, alice) -> None:
    r = client.delete("/deleteuser/nobody", headers=alice["headers"])
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json() == {"error": "User not found"}


def test_delete_other_user_forbidden(client, alice, bob) -> None:
    r = client.delete("/deleteuser/bob", headers=alice["headers"])
    assert r.status_code == status.HTTP_403_FORBIDDEN
    r = client.delete(f"/users/{bob['user']['id']}", headers=alice["headers"])
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert len(client.get("/users").json()) == 2


@pytest.fixture()
def split_stores(app) -> StoreBundle:
    """Stores on separate backends, shared across requests."""
    stores = StoreBundle(
        identity=MemoryIdentityStore(MemoryDatabase()),
        content=MemoryContentStore(MemoryDatabase()),
        interactions=MemoryInteractionStore(MemoryDatabase()),
    )
    app.dependency_overrides[get_stores] = lambda: stores
    yield stores
    app.dependency_overrides.pop(get_stores, None)


def test_partial_failure_is_reported(client, split_stores, register_user, monkeypatch) -> None:
    alice = register_user("alice")
    _create_posts(client, alice, count=2)

    def failing(*args, **kwargs):
        raise StorageUnavailable()

    monkeypatch.setattr(split_stores.content, "update_author_snapshot", failing)
    r = client.put("/editprofile", json={"username": "alicia"}, headers=alice["headers"])

    assert r.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = r.json()
    assert body["step"] == "propagate_author_snapshot"
    assert body["completed"] == ["update_identity"]
    assert "partially applied" in body["error"]
    # The identity change persisted even though the operation reported failure.
    assert split_stores.identity.find_by_username("alicia") is not None
