"""Stats cache persistence backed by a single SQLite file."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Protocol

from .stats import StatEntry

CACHE_VERSION = 1


class CacheCorruptError(Exception):
    """Raised when a cache file exists but cannot be read back."""


class StatStore(Protocol):
    def load(self) -> dict[str, StatEntry]:
        ...

    def save(self, stats: Mapping[str, StatEntry]) -> None:
        ...


class MemoryStatStore:
    """Keep the stats mapping in process memory."""

    def __init__(self, stats: Mapping[str, StatEntry] | None = None) -> None:
        self._stats: dict[str, StatEntry] | None = dict(stats) if stats is not None else None
        self.saves = 0

    @property
    def path(self) -> Path | None:
        return None

    def load(self) -> dict[str, StatEntry]:
        if self._stats is None:
            raise FileNotFoundError("memory store is empty")
        return dict(self._stats)

    def save(self, stats: Mapping[str, StatEntry]) -> None:
        self._stats = dict(stats)
        self.saves += 1


class SQLiteStatStore:
    """Load and replace the whole path -> StatEntry mapping in one SQLite file.

    Every save rewrites the table inside one ``BEGIN IMMEDIATE`` transaction,
    so readers in other processes see either the old or the new cache.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> dict[str, StatEntry]:
        if not self.path.is_file():
            raise FileNotFoundError(self.path)
        try:
            conn = _connect(self.path, readonly=True)
        except sqlite3.Error as exc:
            raise CacheCorruptError(f"{self.path}: {exc}") from exc
        try:
            _ensure_schema_readonly(conn)
            rows = conn.execute(
                """
                SELECT path, size, size_string, mime_type, word_count, mtime
                FROM file_stat
                """
            ).fetchall()
        except sqlite3.Error as exc:
            raise CacheCorruptError(f"{self.path}: {exc}") from exc
        finally:
            conn.close()
        return {
            row["path"]: StatEntry(
                size=int(row["size"]),
                size_string=row["size_string"],
                mime_type=row["mime_type"],
                word_count=int(row["word_count"]),
                mtime=int(row["mtime"]),
            )
            for row in rows
        }

    def save(self, stats: Mapping[str, StatEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._write(stats)
        except sqlite3.OperationalError:
            raise
        except sqlite3.DatabaseError:
            # not a database: replace the file
            _remove_cache_files(self.path)
            self._write(stats)

    def _write(self, stats: Mapping[str, StatEntry]) -> None:
        conn = _connect(self.path)
        try:
            generated_at = datetime.now(timezone.utc).isoformat()
            with conn:
                conn.execute("BEGIN IMMEDIATE;")
                _reset_schema(conn)
                conn.executemany(
                    """
                    INSERT INTO file_stat (
                        path,
                        size,
                        size_string,
                        mime_type,
                        word_count,
                        mtime
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            path,
                            entry.size,
                            entry.size_string,
                            entry.mime_type,
                            entry.word_count,
                            entry.mtime,
                        )
                        for path, entry in sorted(stats.items())
                    ],
                )
                conn.execute(
                    "INSERT INTO stats_metadata (id, version, generated_at) VALUES (1, ?, ?)",
                    (CACHE_VERSION, generated_at),
                )
        finally:
            conn.close()


def _connect(db_path: Path, *, readonly: bool = False) -> sqlite3.Connection:
    if readonly:
        db_uri = f"{db_path.resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(db_uri, uri=True)
    else:
        conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA synchronous = NORMAL;")
    conn.execute("PRAGMA busy_timeout = 5000;")
    if readonly:
        conn.execute("PRAGMA query_only = ON;")
    return conn


def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    ).fetchone()
    return row is not None


def _ensure_schema_readonly(conn: sqlite3.Connection) -> None:
    for table in ("stats_metadata", "file_stat"):
        if not _table_exists(conn, table):
            raise sqlite3.OperationalError(f"Missing table: {table}")
    row = conn.execute("SELECT version FROM stats_metadata WHERE id = 1").fetchone()
    if row is None or int(row["version"]) != CACHE_VERSION:
        raise sqlite3.OperationalError("Cache version mismatch")


def _reset_schema(conn: sqlite3.Connection) -> None:
    conn.execute("DROP TABLE IF EXISTS stats_metadata")
    conn.execute("DROP TABLE IF EXISTS file_stat")
    conn.execute(
        """
        CREATE TABLE stats_metadata (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            version INTEGER NOT NULL,
            generated_at TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE file_stat (
            path TEXT PRIMARY KEY,
            size INTEGER NOT NULL,
            size_string TEXT NOT NULL,
            mime_type TEXT NOT NULL,
            word_count INTEGER NOT NULL,
            mtime INTEGER NOT NULL
        )
        """
    )


def _remove_cache_files(db_path: Path) -> None:
    for candidate in (db_path, Path(f"{db_path}-journal")):
        if candidate.exists():
            candidate.unlink()


def cache_generated_at(path: Path | str) -> str | None:
    """Return when the cache at *path* was last written, if readable."""

    db_path = Path(path).expanduser()
    if not db_path.is_file():
        return None
    try:
        conn = _connect(db_path, readonly=True)
    except sqlite3.Error:
        return None
    try:
        row = conn.execute("SELECT generated_at FROM stats_metadata WHERE id = 1").fetchone()
    except sqlite3.Error:
        return None
    finally:
        conn.close()
    return row["generated_at"] if row is not None else None


def clear_stats_cache(path: Path | str) -> int:
    """Delete the cache file at *path*, returning how many entries it held."""

    db_path = Path(path).expanduser()
    if not db_path.exists():
        return 0
    try:
        total = len(SQLiteStatStore(db_path).load())
    except (FileNotFoundError, CacheCorruptError):
        total = 0
    _remove_cache_files(db_path)
    return total
