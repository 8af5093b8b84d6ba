"""Persisted change-detection state for ``tasc watch``.

The watcher remembers the digest of the last API description it acted on in
a small JSON file (``.api-cache.json`` by default)::

    {"hash": "9f86d0...", "timestamp": 1700000000000}

The record survives restarts and is never removed on shutdown, so a watcher
restarted against an unchanged API does not regenerate.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from tasc.config import atomic_write
from tasc.models import CacheRecord

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    """Where the scheduler keeps its :class:`~tasc.models.CacheRecord`."""

    def load(self) -> Optional[CacheRecord]: ...

    def save(self, record: CacheRecord) -> None: ...


class FileCacheStore:
    """:class:`CacheStore` backed by a JSON file.

    A missing, unreadable, or malformed file loads as ``None``, which the
    scheduler treats as "never seen" and answers by regenerating.

    Args:
        path: Location of the cache file.

    Example::

        store = FileCacheStore(Path(".api-cache.json"))
        if store.load() is None:
            store.save(fetched.to_record())
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> Optional[CacheRecord]:
        """Read the record, or ``None`` if there is no usable one."""
        if not self.path.is_file():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return CacheRecord.model_validate(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, exc)
            return None

    def save(self, record: CacheRecord) -> None:
        """Atomically replace the file with *record*."""
        atomic_write(self.path, json.dumps(record.model_dump(), indent=2) + "\n")

    def __repr__(self) -> str:
        return f"FileCacheStore({str(self.path)!r})"
