"""Tests for post-related endpoints."""

import pytest
from fastapi import status


def _create(client, user, content="hello"):
    r = client.post("/posts", json={"content": content}, headers=user["headers"])
    assert r.status_code == status.HTTP_200_OK, r.text
    return r.json()


def test_create_post_snapshots_author(client, alice) -> None:
    post = _create(client, alice)
    assert post["author_id"] == alice["user"]["id"]
    assert post["username"] == "alice"
    assert post["avatar"] == "alice.png"
    assert post["content"] == "hello"


def test_create_post_requires_auth(client) -> None:
    r = client.post("/posts", json={"content": "hello"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.parametrize("payload", [{}, {"content": ""}, {"content": "   "}])
def test_create_post_requires_content(client, alice, payload) -> None:
    r = client.post("/posts", json=payload, headers=alice["headers"])
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_list_posts_newest_first(client, alice, bob) -> None:
    first = _create(client, alice, "first")
    second = _create(client, bob, "second")
    third = _create(client, alice, "third")

    for path in ("/posts", "/post", "/api/v1/posts"):
        r = client.get(path)
        assert r.status_code == status.HTTP_200_OK
        assert [p["id"] for p in r.json()] == [third["id"], second["id"], first["id"]]


def test_get_post(client, alice) -> None:
    post = _create(client, alice)
    assert client.get(f"/posts/{post['id']}").json()["content"] == "hello"
    r = client.get("/posts/missing")
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json() == {"error": "Post not found"}


def test_edit_post_by_owner(client, alice) -> None:
    post = _create(client, alice)
    r = client.put(f"/post/{post['id']}", json={"content": "edited"}, headers=alice["headers"])
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["content"] == "edited"
    assert r.json()["updated_at"] is not None


def test_edit_post_by_non_owner_forbidden(client, alice, bob) -> None:
    post = _create(client, alice)
    r = client.put(f"/posts/{post['id']}", json={"content": "mine now"}, headers=bob["headers"])
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json() == {"error": "Forbidden"}
    assert client.get(f"/posts/{post['id']}").json()["content"] == "hello"


def test_edit_missing_post(client, alice) -> None:
    r = client.put("/posts/missing", json={"content": "x"}, headers=alice["headers"])
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_delete_post_removes_interactions(client, alice, bob) -> None:
    post = _create(client, alice)
    client.post("/react", json={"post_id": post["id"]}, headers=bob["headers"])
    client.post("/comment", json={"post_id": post["id"], "content": "nice"}, headers=bob["headers"])

    r = client.delete(f"/posts/{post['id']}", headers=alice["headers"])
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"message": "Post deleted", "interactions_deleted": 2}

    assert client.get("/posts").json() == []
    counts = client.get("/QuanOfReact", params={"postId": post["id"]}).json()
    assert counts["likes"] == 0
    assert counts["comments"] == 0


def test_delete_post_by_non_owner_forbidden(client, alice, bob) -> None:
    post = _create(client, alice)
    r = client.delete(f"/post/{post['id']}", headers=bob["headers"])
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert len(client.get("/posts").json()) == 1


def test_delete_missing_post(client, alice) -> None:
    r = client.delete("/posts/missing", headers=alice["headers"])
    assert r.status_code == status.HTTP_404_NOT_FOUND
