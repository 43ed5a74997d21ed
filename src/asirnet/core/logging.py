"""Logging setup for the API process."""

from __future__ import annotations

import logging

from asirnet.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once using ``LOG_LEVEL``."""
    resolved = (level or settings.log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("asirnet").setLevel(resolved)
