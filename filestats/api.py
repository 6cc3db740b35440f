"""Public Python API for filestats."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Sequence

from .config import SUPPORTED_HTML_SCOPES, Config, load_config
from .services.cache_service import init_caching, load_stats_safe, open_store
from .services.index_service import IndexParams, IndexResult, index_file_stats
from .stats import StatEntry, detect_mime_type, word_count
from .text import Messages
from .utils import collect_universe, normalize_extensions


class FileStatsError(ValueError):
    """Raised when the filestats public API input is invalid."""


def _resolve_config(
    config: Config | None,
    *,
    use_caching: bool | None = None,
    cache_file: Path | str | None = None,
    html_scope: str | None = None,
) -> Config:
    resolved = config if config is not None else load_config()
    if use_caching is not None:
        resolved = replace(resolved, use_caching=bool(use_caching))
    if cache_file is not None:
        resolved = replace(resolved, file_stats_cachefile=Path(cache_file).expanduser())
    if html_scope is not None:
        scope = html_scope.strip().lower()
        if scope not in SUPPORTED_HTML_SCOPES:
            raise FileStatsError(
                Messages.ERROR_HTML_SCOPE_INVALID.format(
                    value=html_scope, allowed=", ".join(SUPPORTED_HTML_SCOPES)
                )
            )
        resolved = replace(resolved, html_scope=scope)
    return resolved


def index(
    data_dir: Path | str,
    *,
    reindex_all: bool = False,
    reindex: bool = False,
    reindex_cat: str | None = None,
    delindex: bool = False,
    use_caching: bool | None = None,
    cache_file: Path | str | None = None,
    html_scope: str | None = None,
    include_hidden: bool = False,
    respect_gitignore: bool = True,
    exclude_patterns: Sequence[str] | None = None,
    entry_extensions: Sequence[str] | None = None,
    config: Config | None = None,
) -> IndexResult:
    """Collect the files under *data_dir* and refresh their cached stats."""

    settings = _resolve_config(
        config,
        use_caching=use_caching,
        cache_file=cache_file,
        html_scope=html_scope,
    )
    extensions = settings.entry_extensions
    if entry_extensions is not None:
        extensions = normalize_extensions(entry_extensions)
        if not extensions:
            raise FileStatsError(Messages.ERROR_EXTENSIONS_EMPTY)
    try:
        universe = collect_universe(
            data_dir,
            entry_extensions=extensions,
            include_hidden=include_hidden,
            respect_gitignore=respect_gitignore,
            exclude_patterns=exclude_patterns,
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise FileStatsError(str(exc)) from exc
    params = IndexParams(
        reindex_all=reindex_all,
        reindex=reindex,
        reindex_cat=reindex_cat,
        delindex=delindex,
    )
    return index_file_stats(universe, params=params, config=settings)


def load_file_stats(
    *,
    cache_file: Path | str | None = None,
    config: Config | None = None,
) -> Mapping[str, StatEntry]:
    """Return the persisted stats as a read-only mapping (empty if none)."""

    settings = _resolve_config(config, cache_file=cache_file)
    if not init_caching(settings):
        return MappingProxyType({})
    stats = load_stats_safe(open_store(settings))
    return MappingProxyType(stats or {})


def get_file_stats(
    path: Path | str,
    *,
    cache_file: Path | str | None = None,
    config: Config | None = None,
) -> StatEntry | None:
    """Look up the cached stats of one file by its full path."""

    return load_file_stats(cache_file=cache_file, config=config).get(str(path))


def get_mime_type(path: Path | str) -> str:
    return detect_mime_type(path)


def get_word_count(path: Path | str, mime_type: str, *, html_scope: str = "body") -> int:
    if html_scope not in SUPPORTED_HTML_SCOPES:
        raise FileStatsError(
            Messages.ERROR_HTML_SCOPE_INVALID.format(
                value=html_scope, allowed=", ".join(SUPPORTED_HTML_SCOPES)
            )
        )
    return word_count(path, mime_type, html_scope=html_scope)
