"""Shared helpers for loading and saving the stats cache safely."""

from __future__ import annotations

import logging
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Mapping

from ..config import Config, resolve_cache_file
from ..stats import StatEntry

if TYPE_CHECKING:
    from ..cache import SQLiteStatStore, StatStore

logger = logging.getLogger(__name__)

_caching_unavailable = False


class CacheSaveError(RuntimeError):
    """Raised when the stats cache cannot be written."""


def _cache_module() -> ModuleType | None:
    """Import the SQLite cache module, or return None when sqlite3 is missing.

    The first failed import disables caching for the rest of the process.
    """

    global _caching_unavailable
    if _caching_unavailable:
        return None
    try:
        from .. import cache
    except ImportError as exc:
        logger.debug("FileStats: cache disabled, sqlite3 not available (%s)", exc)
        _caching_unavailable = True
        return None
    return cache


def init_caching(config: Config) -> bool:
    """Return True when the stats cache can be used for this pass."""

    if not config.use_caching or _cache_module() is None:
        return False
    logger.debug("FileStats: using caching")
    return True


def open_store(config: Config) -> SQLiteStatStore:
    """Return the SQLite store configured for *config*."""

    from ..cache import SQLiteStatStore

    return SQLiteStatStore(resolve_cache_file(config))


def load_stats_safe(store: StatStore) -> dict[str, StatEntry] | None:
    """Load the cached stats, returning None if missing or unreadable."""

    from ..cache import CacheCorruptError

    try:
        stats = store.load()
    except FileNotFoundError:
        logger.info("FileStats: Flushing caches")
        return None
    except CacheCorruptError as exc:
        logger.info("FileStats: Flushing caches (%s)", exc)
        return None
    logger.info("FileStats: Using cached state")
    return stats


def save_stats(store: StatStore, stats: Mapping[str, StatEntry]) -> Path | None:
    """Persist *stats* through *store* and return the cache path if any.

    Write failures surface as :class:`CacheSaveError`.
    """

    import sqlite3

    logger.info("FileStats: Saving caches")
    try:
        store.save(stats)
    except (OSError, sqlite3.Error) as exc:
        raise CacheSaveError(str(exc)) from exc
    return getattr(store, "path", None)


def cache_generated_at(path: Path) -> str | None:
    """Return when the cache at *path* was written, or None if unknown."""

    cache = _cache_module()
    if cache is None:
        return None
    return cache.cache_generated_at(path)


def clear_cache(path: Path) -> int:
    """Remove the cache at *path*, returning how many entries it held."""

    cache = _cache_module()
    if cache is not None:
        return cache.clear_stats_cache(path)
    if path.exists():
        path.unlink()
    return 0
