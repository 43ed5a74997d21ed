# src/asirnet/services/__init__.py
"""Business logic services for the Asirnet application."""

from .coordinator import CascadeReport, ConsistencyCoordinator
from .keepalive import KeepAliveWorker

__all__ = [
    "CascadeReport",
    "ConsistencyCoordinator",
    "KeepAliveWorker",
]
