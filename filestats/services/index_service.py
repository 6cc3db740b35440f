"""Logic helpers for the `filestats index` command."""

from __future__ import annotations

import functools
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Collection, Iterable, Mapping, Sequence

from .cache_service import init_caching, load_stats_safe, open_store, save_stats
from ..config import Config, load_config
from ..stats import StatEntry, scan_file

if TYPE_CHECKING:
    from ..cache import StatStore

logger = logging.getLogger(__name__)

Scanner = Callable[[str], StatEntry | None]


class ReindexMode(str, Enum):
    FULL = "full"
    ADDITIVE = "additive"
    CATEGORY = "category"
    DELETION_SWEEP = "deletion_sweep"


class IndexStatus(str, Enum):
    STORED = "stored"
    UP_TO_DATE = "up_to_date"
    UNCACHED = "uncached"


@dataclass(frozen=True, slots=True)
class EntryFile:
    path: str
    category: str
    mtime: int | None = None


@dataclass(frozen=True, slots=True)
class OtherFile:
    path: str
    category: str


@dataclass(slots=True)
class FileUniverse:
    entries: Sequence[EntryFile] = ()
    others: Sequence[OtherFile] = ()
    categories: Collection[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class ReindexRequest:
    mode: ReindexMode = ReindexMode.ADDITIVE
    category: str | None = None


@dataclass(frozen=True, slots=True)
class IndexParams:
    """Reindex switches as the host receives them (query or CLI flags)."""

    reindex_all: bool = False
    reindex: bool = False
    reindex_cat: str | None = None
    delindex: bool = False


@dataclass(slots=True)
class ReindexResult:
    stats: dict[str, StatEntry]
    scanned: int = 0
    deleted: int = 0
    changed: bool = False


@dataclass(slots=True)
class IndexResult:
    status: IndexStatus
    stats: Mapping[str, StatEntry]
    request: ReindexRequest
    scanned: int = 0
    deleted: int = 0
    saved: bool = False
    cache_path: Path | None = None


def normalize_category(name: str | None) -> str:
    """Trim a category id given by a user or a query string.

    Surrounding whitespace and leading or trailing path separators are
    removed, so ``" /stories/ "`` becomes ``stories``.
    """

    if not name:
        return ""
    separators = "/" + os.sep + (os.altsep or "")
    return name.strip().strip(separators)


def category_matches(category: str, wanted: str) -> bool:
    """Return True if *category* is *wanted* or starts with it.

    This is a plain string prefix test: ``stories2`` matches ``stories``.
    """

    return category == wanted or category.startswith(wanted)


def resolve_request(
    *,
    reindex_all: bool = False,
    reindex: bool = False,
    reindex_cat: str | None = None,
    delindex: bool = False,
    categories: Collection[str] = (),
    cache_available: bool = True,
) -> ReindexRequest:
    """Pick the reindex mode: full, then category, then additive or sweep."""

    if reindex_all or not cache_available:
        return ReindexRequest(ReindexMode.FULL)
    category = normalize_category(reindex_cat)
    if category:
        if category in categories:
            return ReindexRequest(ReindexMode.CATEGORY, category=category)
        logger.info("FileStats: unknown category %s, ignoring reindex_cat", category)
    if delindex:
        return ReindexRequest(ReindexMode.DELETION_SWEEP)
    return ReindexRequest(ReindexMode.ADDITIVE)


class _Reconciler:
    def __init__(self, stats: dict[str, StatEntry], scan: Scanner) -> None:
        self.stats = stats
        self.scan = scan
        self.scanned = 0
        self.deleted = 0
        self.changed = False

    def set_stats(self, path: str) -> None:
        entry = self.scan(path)
        if entry is not None:
            self.stats[path] = entry
            self.scanned += 1
            self.changed = True
            logger.debug("FileStats: scanned %s", path)
            return
        if self.stats.pop(path, None) is not None:
            self.deleted += 1
            self.changed = True
            logger.debug("FileStats: dropped %s", path)

    def reindex_all(self, universe: FileUniverse) -> None:
        logger.info("FileStats: reindexing ALL")
        self.stats.clear()
        for path in _universe_paths(universe):
            self.set_stats(path)
        self.changed = True

    def reindex_category(self, universe: FileUniverse, category: str) -> None:
        logger.info("FileStats: reindexing %s", category)
        for record in _universe_records(universe):
            if category_matches(record.category, category):
                self.set_stats(record.path)
        self.changed = True

    def add_missing(self, universe: FileUniverse) -> None:
        added = 0
        for entry in universe.entries:
            if entry.path not in self.stats:
                added += 1
                self.set_stats(entry.path)
        for other in universe.others:
            if other.path in self.stats or os.path.isdir(other.path):
                continue
            added += 1
            self.set_stats(other.path)
        if added:
            logger.info("FileStats: added %d new files", added)

    def delete_missing(self) -> None:
        logger.info("FileStats: checking for deleted files")
        gone = [path for path in self.stats if not os.path.isfile(path)]
        for path in gone:
            del self.stats[path]
        if gone:
            self.deleted += len(gone)
            self.changed = True
            logger.info("FileStats: deleted %d gone files", len(gone))


def _universe_records(universe: FileUniverse) -> Iterable[EntryFile | OtherFile]:
    yield from universe.entries
    yield from universe.others


def _universe_paths(universe: FileUniverse) -> Iterable[str]:
    for record in _universe_records(universe):
        yield record.path


def reindex(
    request: ReindexRequest,
    universe: FileUniverse,
    previous: Mapping[str, StatEntry] | None,
    *,
    scan: Scanner = scan_file,
) -> ReindexResult:
    """Reconcile *previous* with *universe* and return the updated stats.

    *previous* is left untouched. A missing previous cache always forces a
    full reindex.
    """

    mode = request.mode if previous is not None else ReindexMode.FULL
    reconciler = _Reconciler(dict(previous or {}), scan)
    if mode is ReindexMode.FULL:
        reconciler.reindex_all(universe)
    elif mode is ReindexMode.CATEGORY:
        reconciler.reindex_category(universe, normalize_category(request.category))
    else:
        reconciler.add_missing(universe)
        if mode is ReindexMode.DELETION_SWEEP:
            reconciler.delete_missing()
    return ReindexResult(
        stats=reconciler.stats,
        scanned=reconciler.scanned,
        deleted=reconciler.deleted,
        changed=reconciler.changed,
    )


def index_file_stats(
    universe: FileUniverse,
    *,
    params: IndexParams = IndexParams(),
    config: Config | None = None,
    store: StatStore | None = None,
    scan: Scanner | None = None,
) -> IndexResult:
    """Load the stats cache, reconcile it with *universe* and save it once.

    Caching problems never fail the pass: a missing or unreadable cache
    forces a full reindex and disabled caching skips persistence.
    """

    config = config if config is not None else load_config()
    if scan is None:
        scan = functools.partial(scan_file, html_scope=config.html_scope)

    caching = init_caching(config)
    previous: dict[str, StatEntry] | None = None
    if caching:
        if store is None:
            store = open_store(config)
        if not params.reindex_all:
            previous = load_stats_safe(store)

    request = resolve_request(
        reindex_all=params.reindex_all,
        reindex=params.reindex,
        reindex_cat=params.reindex_cat,
        delindex=params.delindex,
        categories=universe.categories,
        cache_available=previous is not None,
    )
    result = reindex(request, universe, previous, scan=scan)

    cache_path: Path | None = None
    if not caching:
        status = IndexStatus.UNCACHED
    elif result.changed:
        cache_path = save_stats(store, result.stats)
        status = IndexStatus.STORED
    else:
        cache_path = getattr(store, "path", None)
        status = IndexStatus.UP_TO_DATE

    return IndexResult(
        status=status,
        stats=MappingProxyType(result.stats),
        request=request,
        scanned=result.scanned,
        deleted=result.deleted,
        saved=status is IndexStatus.STORED,
        cache_path=cache_path,
    )
