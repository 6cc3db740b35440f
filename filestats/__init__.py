"""filestats package initialization."""

from __future__ import annotations

from .api import (
    FileStatsError,
    get_file_stats,
    get_mime_type,
    get_word_count,
    index,
    load_file_stats,
)
from .stats import StatEntry

__all__ = [
    "__version__",
    "FileStatsError",
    "StatEntry",
    "get_file_stats",
    "get_mime_type",
    "get_version",
    "get_word_count",
    "index",
    "load_file_stats",
]

__version__ = "0.51.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
