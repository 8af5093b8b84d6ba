"""Change-detection cache for tasc.

This package provides the :class:`CacheStore` protocol and its JSON-file
implementation, :class:`FileCacheStore`, which records the digest of the
last API description the watcher acted on.

The store is consumed by
:class:`~tasc.watch.scheduler.ChangeDetectionScheduler`; its location comes
from :func:`~tasc.paths.get_resolved_paths`.
"""

from tasc.cache.record import CacheStore, FileCacheStore

__all__ = ["CacheStore", "FileCacheStore"]
