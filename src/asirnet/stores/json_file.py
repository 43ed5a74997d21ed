"""Flat JSON document storage.

The whole database is one JSON file with a list of records per collection.
It is loaded once on start-up and rewritten after every mutation
(or once at the end of an atomic block).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from asirnet.core.errors import StorageUnavailable
from asirnet.stores.base import CommentRecord, PostRecord, ReactionRecord, UserRecord
from asirnet.stores.memory import COLLECTIONS, MemoryDatabase

logger = logging.getLogger(__name__)

RECORD_TYPES: dict[str, type] = {
    "users": UserRecord,
    "posts": PostRecord,
    "reactions": ReactionRecord,
    "comments": CommentRecord,
}
DATETIME_FIELDS = ("created_at", "updated_at")


def _encode(record: Any) -> dict[str, Any]:
    data = asdict(record)
    for key in DATETIME_FIELDS:
        if isinstance(data.get(key), datetime):
            data[key] = data[key].isoformat()
    return data


def _decode(record_type: type, data: dict[str, Any]) -> Any:
    values = dict(data)
    for key in DATETIME_FIELDS:
        if values.get(key):
            values[key] = datetime.fromisoformat(values[key])
    return record_type(**values)


class JsonFileDatabase(MemoryDatabase):
    """Memory database mirrored to a JSON document on disk."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__()
        self.path = Path(path)
        self.load()

    def load(self) -> None:
        if not self.path.exists():
            return
        try:
            document = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as err:
            raise StorageUnavailable(f"Cannot read {self.path}: {err}") from err

        for name in COLLECTIONS:
            record_type = RECORD_TYPES[name]
            records = [_decode(record_type, item) for item in document.get(name, [])]
            setattr(self, name, {record.id: record for record in records})
        self.sequence = int(document.get("sequence", 0))
        logger.info(
            "Loaded %d users and %d posts from %s",
            len(self.users),
            len(self.posts),
            self.path,
        )

    def flush(self) -> None:
        document: dict[str, Any] = {
            name: [_encode(record) for record in getattr(self, name).values()]
            for name in COLLECTIONS
        }
        document["sequence"] = self.sequence
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling file and rename so readers never see half a document.
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as err:
            raise StorageUnavailable(f"Cannot write {self.path}: {err}") from err

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as err:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageUnavailable(f"Cannot write {self.path}: {err}") from err
