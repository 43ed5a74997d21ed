"""Tests for registration, login and token handling."""

import pytest
from fastapi import status


@pytest.mark.parametrize("path", ["/register", "/signup", "/api/v1/register"])
def test_register_success(client, path) -> None:
    r = client.post(path, json={"username": "alice", "password": "pw1", "bio": "hello"})
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["message"] == "Registered!"
    assert data["user"]["username"] == "alice"
    assert data["user"]["bio"] == "hello"
    assert "password" not in data["user"]
    assert "password_digest" not in data["user"]


def test_register_duplicate_username(client) -> None:
    client.post("/register", json={"username": "alice", "password": "pw1"})
    r = client.post("/register", json={"username": "alice", "password": "other"})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["error"] == "User exists"


@pytest.mark.parametrize(
    "payload",
    [
        {"username": "alice"},
        {"password": "pw1"},
        {"username": "   ", "password": "pw1"},
        {"username": "alice", "password": ""},
    ],
)
def test_register_missing_fields(client, payload) -> None:
    r = client.post("/register", json=payload)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert "error" in r.json()


@pytest.mark.parametrize("path", ["/login", "/signin"])
def test_login_returns_usable_token(client, path) -> None:
    client.post("/register", json={"username": "alice", "password": "pw1"})
    r = client.post(path, json={"username": "alice", "password": "pw1"})
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["token_type"] == "bearer"

    me = client.get("/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["id"] == data["user"]["id"]


@pytest.mark.parametrize(
    "credentials",
    [
        {"username": "alice", "password": "wrong"},
        {"username": "nobody", "password": "pw1"},
    ],
)
def test_login_invalid_credentials(client, credentials) -> None:
    client.post("/register", json={"username": "alice", "password": "pw1"})
    r = client.post("/login", json=credentials)
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["error"].startswith("Invalid credentials")


def test_me_requires_token(client) -> None:
    r = client.get("/me")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json() == {"error": "No token"}


def test_me_rejects_bad_token(client) -> None:
    r = client.get("/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json() == {"error": "Invalid token"}


def test_token_for_deleted_user_is_rejected(client, alice) -> None:
    r = client.delete(f"/users/{alice['user']['id']}", headers=alice["headers"])
    assert r.status_code == status.HTTP_200_OK

    r = client.get("/me", headers=alice["headers"])
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
