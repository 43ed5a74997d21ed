"""Database engine and session configuration.

Users, posts and interactions each get an engine for their configured URL.
Collections that share a URL share the engine, and therefore a session.
"""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from asirnet.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import asirnet.models  # noqa: E402,F401

_ENGINES: dict[str, Engine] = {}


def make_engine(url: str) -> Engine:
    """Create an engine for ``url`` with SQLite-friendly defaults."""
    kwargs: dict[str, object] = {"pool_pre_ping": True, "echo": settings.sql_debug}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def get_engine(url: str) -> Engine:
    """Return the process-wide engine for ``url``, creating it on first use."""
    engine = _ENGINES.get(url)
    if engine is None:
        engine = _ENGINES[url] = make_engine(url)
    return engine


def collection_engines(urls: Mapping[str, str] | None = None) -> dict[str, Engine]:
    """Return the engine backing each collection."""
    urls = urls or settings.collection_database_urls
    return {name: get_engine(url) for name, url in urls.items()}


SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)


def create_tables(engines: Mapping[str, Engine] | None = None) -> None:
    """Create all database tables on every collection engine."""
    for engine in set((engines or collection_engines()).values()):
        Base.metadata.create_all(bind=engine)


def drop_tables(engines: Mapping[str, Engine] | None = None) -> None:
    """Drop all database tables on every collection engine."""
    for engine in set((engines or collection_engines()).values()):
        Base.metadata.drop_all(bind=engine)
