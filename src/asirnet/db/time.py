# src/asirnet/db/time.py
"""Clock helpers shared by the stores and ORM models."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current time in UTC, timezone-aware."""
    return datetime.now(UTC)
