# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ["STORAGE_BACKEND"] = "memory"
os.environ.setdefault("SECRET_KEY", "test-secret")

from asirnet.api.v1.dependencies import get_store_provider
from asirnet.db.session import make_engine
from asirnet.main import app as fastapi_app
from asirnet.stores.base import StoreBundle
from asirnet.stores.factory import MemoryStoreProvider, SqlStoreProvider, StoreProvider
from asirnet.stores.json_file import JsonFileDatabase

COLLECTIONS = ("users", "posts", "interactions")


def _sql_provider(split: bool = False) -> SqlStoreProvider:
    if split:
        engines = {name: make_engine("sqlite://") for name in COLLECTIONS}
    else:
        engine = make_engine("sqlite://")
        engines = {name: engine for name in COLLECTIONS}
    provider = SqlStoreProvider(engines)
    provider.prepare()
    return provider


def _build_provider(kind: str, tmp_path: Path) -> StoreProvider:
    if kind == "memory":
        return MemoryStoreProvider()
    if kind == "json":
        return MemoryStoreProvider(JsonFileDatabase(tmp_path / "asirnet.json"))
    if kind == "sql":
        return _sql_provider()
    if kind == "sql-split":
        return _sql_provider(split=True)
    raise ValueError(kind)


def _dispose(provider: StoreProvider) -> None:
    if isinstance(provider, SqlStoreProvider):
        for engine in set(provider.engines.values()):
            engine.dispose()


@pytest.fixture(params=["memory", "json", "sql", "sql-split"])
def store_provider(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[StoreProvider]:
    """Every storage backend, including SQL with one database per collection."""
    provider = _build_provider(request.param, tmp_path)
    try:
        yield provider
    finally:
        _dispose(provider)


@pytest.fixture()
def stores(store_provider: StoreProvider) -> Iterator[StoreBundle]:
    with store_provider.open() as bundle:
        yield bundle


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def api_provider(tmp_path: Path) -> Iterator[StoreProvider]:
    """Backend used by API tests; SQL so requests exercise real sessions."""
    provider = _build_provider("sql", tmp_path)
    try:
        yield provider
    finally:
        _dispose(provider)


@pytest.fixture(autouse=True)
def override_store_provider(app: FastAPI, api_provider: StoreProvider) -> Iterator[None]:
    app.dependency_overrides[get_store_provider] = lambda: api_provider
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_store_provider, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def register_user(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Register and log in a user; return its profile and auth headers."""

    def _register(username: str, password: str = "pw1", **profile: Any) -> dict[str, Any]:
        r = client.post(
            "/register",
            json={"username": username, "password": password, **profile},
        )
        assert r.status_code == 200, r.text
        r = client.post("/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        data = r.json()
        return {
            "user": data["user"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _register


@pytest.fixture()
def alice(register_user: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return register_user("alice", avatar="alice.png", bio="hi")


@pytest.fixture()
def bob(register_user: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return register_user("bob", password="pw2")
