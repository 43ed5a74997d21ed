"""Database configuration and utilities."""

from .session import SessionLocal, collection_engines, create_tables

__all__ = ["collection_engines", "create_tables", "SessionLocal"]
