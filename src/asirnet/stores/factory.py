"""Selection and per-request wiring of the configured storage backend."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from functools import partial

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from asirnet.core.settings import Settings
from asirnet.db.session import SessionLocal, collection_engines, create_tables
from asirnet.stores.base import StoreBundle
from asirnet.stores.json_file import JsonFileDatabase
from asirnet.stores.memory import MemoryDatabase, memory_bundle
from asirnet.stores.sql import (
    SqlContentStore,
    SqlIdentityStore,
    SqlInteractionStore,
    sql_unit_of_work,
)

logger = logging.getLogger(__name__)

BACKENDS = ("sql", "memory", "json")


class MemoryStoreProvider:
    """Hands out stores over one long-lived memory (or JSON file) database."""

    def __init__(self, db: MemoryDatabase | None = None) -> None:
        self.db = db or MemoryDatabase()

    def prepare(self) -> None:
        """Nothing to provision for an in-process database."""

    @contextmanager
    def open(self) -> Iterator[StoreBundle]:
        yield memory_bundle(self.db)


class SqlStoreProvider:
    """Opens one session per distinct engine for every request.

    When users, posts and interactions share an engine they also share a
    session, and multi-store operations can run in a single transaction.
    """

    def __init__(self, engines: Mapping[str, Engine]) -> None:
        self.engines = dict(engines)

    @property
    def shared_backend(self) -> bool:
        return len(set(self.engines.values())) == 1

    def prepare(self) -> None:
        create_tables(self.engines)

    @contextmanager
    def open(self) -> Iterator[StoreBundle]:
        sessions: dict[Engine, Session] = {}
        for engine in self.engines.values():
            if engine not in sessions:
                sessions[engine] = SessionLocal(bind=engine)
        try:
            identity = SqlIdentityStore(sessions[self.engines["users"]])
            content = SqlContentStore(sessions[self.engines["posts"]])
            interactions = SqlInteractionStore(sessions[self.engines["interactions"]])
            bundle = StoreBundle(
                identity=identity,
                content=content,
                interactions=interactions,
                shared_backend=self.shared_backend,
            )
            if bundle.shared_backend:
                session = identity.session
                bundle.unit_of_work = partial(
                    sql_unit_of_work, session, [identity, content, interactions]
                )
            yield bundle
        finally:
            for session in sessions.values():
                session.close()


StoreProvider = MemoryStoreProvider | SqlStoreProvider


def build_store_provider(settings: Settings) -> StoreProvider:
    """Return the provider selected by ``STORAGE_BACKEND``.

    Raises:
        ValueError: If the configured backend is unknown.
    """
    backend = settings.storage_backend.lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown storage backend {settings.storage_backend!r}")

    logger.info("Using %s storage backend", backend)
    if backend == "memory":
        return MemoryStoreProvider()
    if backend == "json":
        return MemoryStoreProvider(JsonFileDatabase(settings.json_store_path))
    return SqlStoreProvider(collection_engines(settings.collection_database_urls))
