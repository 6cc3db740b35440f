from __future__ import annotations

import sys
from pathlib import Path

import pytest

import filestats
import filestats.cache
from filestats.cache import MemoryStatStore, SQLiteStatStore
from filestats.config import Config
from filestats.services import cache_service
from filestats.stats import StatEntry


def _entry() -> StatEntry:
    return StatEntry(size=3, size_string="3b", mime_type="text/plain", word_count=1, mtime=5)


def test_init_caching_respects_config(monkeypatch) -> None:
    monkeypatch.setattr(cache_service, "_caching_unavailable", False)
    assert cache_service.init_caching(Config(use_caching=True)) is True
    assert cache_service.init_caching(Config(use_caching=False)) is False


def test_init_caching_disables_for_process_without_sqlite(monkeypatch) -> None:
    monkeypatch.setattr(cache_service, "_caching_unavailable", False)
    cache_module = filestats.cache
    monkeypatch.delattr(filestats, "cache", raising=False)
    monkeypatch.setitem(sys.modules, "filestats.cache", None)

    assert cache_service.init_caching(Config(use_caching=True)) is False
    assert cache_service._caching_unavailable is True

    monkeypatch.setitem(sys.modules, "filestats.cache", cache_module)
    assert cache_service.init_caching(Config(use_caching=True)) is False


def test_open_store_uses_configured_cachefile(tmp_path: Path) -> None:
    target = tmp_path / "custom.dat"
    store = cache_service.open_store(Config(file_stats_cachefile=target))
    assert isinstance(store, SQLiteStatStore)
    assert store.path == target


def test_load_stats_safe_returns_none_when_missing(tmp_path: Path) -> None:
    assert cache_service.load_stats_safe(SQLiteStatStore(tmp_path / "none.dat")) is None
    assert cache_service.load_stats_safe(MemoryStatStore()) is None


def test_load_stats_safe_returns_none_when_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "bad.dat"
    path.write_bytes(b"\x00\x01garbage" * 100)
    assert cache_service.load_stats_safe(SQLiteStatStore(path)) is None


def test_load_and_save_stats(tmp_path: Path) -> None:
    store = SQLiteStatStore(tmp_path / "stats.dat")

    saved_path = cache_service.save_stats(store, {"/a.txt": _entry()})

    assert saved_path == store.path
    assert cache_service.load_stats_safe(store) == {"/a.txt": _entry()}
    assert cache_service.save_stats(MemoryStatStore(), {}) is None


def test_save_stats_wraps_write_failures(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = SQLiteStatStore(blocker / "stats.dat")

    with pytest.raises(cache_service.CacheSaveError):
        cache_service.save_stats(store, {"/a.txt": _entry()})


def test_clear_cache_and_generated_at(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(cache_service, "_caching_unavailable", False)
    store = SQLiteStatStore(tmp_path / "stats.dat")
    store.save({"/a.txt": _entry(), "/b.txt": _entry()})

    assert cache_service.cache_generated_at(store.path) is not None
    assert cache_service.clear_cache(store.path) == 2
    assert not store.path.exists()
    assert cache_service.cache_generated_at(store.path) is None


def test_clear_cache_without_sqlite_removes_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(cache_service, "_caching_unavailable", True)
    path = tmp_path / "stats.dat"
    path.write_bytes(b"stale")

    assert cache_service.cache_generated_at(path) is None
    assert cache_service.clear_cache(path) == 0
    assert not path.exists()
