"""Command line interface for filestats."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import SUPPORTED_HTML_SCOPES, load_config, resolve_cache_file, resolve_state_dir
from .services.cache_service import (
    CacheSaveError,
    cache_generated_at,
    clear_cache,
    init_caching,
    load_stats_safe,
    open_store,
)
from .services.config_service import apply_config_updates, get_config_snapshot
from .services.index_service import (
    IndexParams,
    IndexStatus,
    ReindexMode,
    category_matches,
    index_file_stats,
    normalize_category,
)
from .text import Messages, Styles
from .utils import collect_universe, format_path, resolve_directory

console = Console()

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"filestats v{__version__}")
        raise typer.Exit()


def _parse_boolean(value: str) -> bool:
    token = value.strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("filestats")
    if not verbose:
        return
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def _format_mtime(value: int) -> str:
    return datetime.fromtimestamp(value).strftime("%Y-%m-%d %H:%M")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help=Messages.HELP_VERSION,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help=Messages.HELP_VERBOSE,
    ),
) -> None:
    """Global Typer callback for shared options."""
    _configure_logging(verbose)


@app.command()
def index(
    path: Path = typer.Option(
        Path.cwd(),
        "--path",
        "-p",
        help=Messages.HELP_INDEX_PATH,
    ),
    reindex_all: bool = typer.Option(
        False,
        "--reindex-all",
        help=Messages.HELP_REINDEX_ALL,
    ),
    reindex: bool = typer.Option(
        False,
        "--reindex",
        help=Messages.HELP_REINDEX,
    ),
    reindex_cat: str | None = typer.Option(
        None,
        "--reindex-cat",
        help=Messages.HELP_REINDEX_CAT,
    ),
    delindex: bool = typer.Option(
        False,
        "--delindex",
        help=Messages.HELP_DELINDEX,
    ),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help=Messages.HELP_NO_CACHE,
    ),
    include_hidden: bool = typer.Option(
        False,
        "--include-hidden",
        "-i",
        help=Messages.HELP_INCLUDE_HIDDEN,
    ),
    no_respect_gitignore: bool = typer.Option(
        False,
        "--no-respect-gitignore",
        help=Messages.HELP_NO_RESPECT_GITIGNORE,
    ),
    exclude_patterns: list[str] | None = typer.Option(
        None,
        "--exclude-pattern",
        help=Messages.HELP_EXCLUDE_PATTERNS,
    ),
) -> None:
    """Create or refresh the cached file stats for a data directory."""
    config = load_config()
    if no_cache:
        config.use_caching = False
    try:
        directory = resolve_directory(path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    universe = collect_universe(
        directory,
        entry_extensions=config.entry_extensions,
        include_hidden=include_hidden,
        respect_gitignore=not no_respect_gitignore,
        exclude_patterns=exclude_patterns,
    )
    category = normalize_category(reindex_cat)
    if category and category not in universe.categories:
        console.print(
            _styled(Messages.INFO_CATEGORY_UNKNOWN.format(category=category), Styles.WARNING)
        )

    console.print(_styled(Messages.INFO_INDEX_RUNNING.format(path=directory), Styles.INFO))
    params = IndexParams(
        reindex_all=reindex_all,
        reindex=reindex,
        reindex_cat=reindex_cat,
        delindex=delindex,
    )
    try:
        result = index_file_stats(universe, params=params, config=config)
    except CacheSaveError as exc:
        console.print(
            _styled(
                Messages.ERROR_SAVE_FAILED.format(path=resolve_cache_file(config), reason=exc),
                Styles.ERROR,
            )
        )
        raise typer.Exit(code=1)

    mode = result.request.mode.value
    if result.request.mode is ReindexMode.CATEGORY:
        mode = f"{mode} ({result.request.category})"
    console.print(_styled(Messages.INFO_INDEX_MODE.format(mode=mode), Styles.INFO))
    console.print(
        Messages.INFO_INDEX_SUMMARY.format(
            scanned=result.scanned,
            deleted=result.deleted,
            plural="y" if result.deleted == 1 else "ies",
            total=len(result.stats),
        )
    )
    if result.status == IndexStatus.UNCACHED:
        console.print(_styled(Messages.INFO_INDEX_UNCACHED, Styles.WARNING))
    elif result.status == IndexStatus.UP_TO_DATE:
        console.print(_styled(Messages.INFO_INDEX_UP_TO_DATE, Styles.INFO))
    elif result.cache_path is not None:
        console.print(
            _styled(Messages.INFO_INDEX_SAVED.format(path=result.cache_path), Styles.SUCCESS)
        )


@app.command()
def show(
    path: Path | None = typer.Option(
        None,
        "--path",
        "-p",
        help=Messages.HELP_INDEX_PATH,
    ),
    category: str | None = typer.Option(
        None,
        "--category",
        "-c",
        help=Messages.HELP_SHOW_CATEGORY,
    ),
) -> None:
    """List the cached stats, optionally limited to a data directory."""
    config = load_config()
    cache_file = resolve_cache_file(config)
    stats = load_stats_safe(open_store(config)) if init_caching(config) else None
    if not stats:
        console.print(_styled(Messages.INFO_SHOW_EMPTY.format(path=cache_file), Styles.INFO))
        return

    base = resolve_directory(path) if path is not None else None
    wanted = normalize_category(category)
    table = Table(title=Messages.TABLE_TITLE, header_style=Styles.TABLE_HEADER)
    table.add_column(Messages.TABLE_HEADER_PATH, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_SIZE, justify="right")
    table.add_column(Messages.TABLE_HEADER_MIME)
    table.add_column(Messages.TABLE_HEADER_WORDS, justify="right")
    table.add_column(Messages.TABLE_HEADER_MTIME)
    for file_path, entry in sorted(stats.items()):
        if base is not None:
            try:
                rel_parent = Path(file_path).parent.relative_to(base).as_posix()
            except ValueError:
                continue
            if rel_parent == ".":
                rel_parent = ""
            if wanted and not category_matches(rel_parent, wanted):
                continue
        table.add_row(
            format_path(Path(file_path), base),
            entry.size_string,
            entry.mime_type,
            str(entry.word_count),
            _format_mtime(entry.mtime),
        )
    generated = cache_generated_at(cache_file) or "unknown"
    console.print(
        _styled(
            Messages.INFO_SHOW_HEADER.format(path=cache_file, generated=generated),
            Styles.TITLE,
        )
    )
    console.print(table)


@app.command(help=Messages.HELP_CLEAR)
def clear() -> None:
    """Remove the stats cache file."""
    cache_file = resolve_cache_file(load_config())
    removed = clear_cache(cache_file)
    if not removed and not cache_file.exists():
        console.print(_styled(Messages.INFO_CLEAR_NONE.format(path=cache_file), Styles.INFO))
        return
    console.print(
        _styled(
            Messages.INFO_CLEARED.format(
                count=removed,
                plural="y" if removed == 1 else "ies",
                path=cache_file,
            ),
            Styles.SUCCESS,
        )
    )


@app.command(help=Messages.HELP_CONFIG)
def config(
    show: bool = typer.Option(
        False,
        "--show",
        help=Messages.HELP_SHOW_CONFIG,
    ),
    set_state_dir: Path | None = typer.Option(
        None,
        "--set-state-dir",
        help=Messages.HELP_SET_STATE_DIR,
    ),
    set_cachefile: Path | None = typer.Option(
        None,
        "--set-cachefile",
        help=Messages.HELP_SET_CACHEFILE,
    ),
    clear_cachefile: bool = typer.Option(
        False,
        "--clear-cachefile",
        help=Messages.HELP_CLEAR_CACHEFILE,
    ),
    use_caching: str | None = typer.Option(
        None,
        "--use-caching",
        help=Messages.HELP_USE_CACHING,
    ),
    set_html_scope: str | None = typer.Option(
        None,
        "--set-html-scope",
        help=Messages.HELP_SET_HTML_SCOPE,
    ),
    set_entry_ext: list[str] | None = typer.Option(
        None,
        "--set-entry-ext",
        help=Messages.HELP_SET_ENTRY_EXT,
    ),
) -> None:
    """Show or update the stored configuration."""
    use_caching_value: bool | None = None
    if use_caching is not None:
        try:
            use_caching_value = _parse_boolean(use_caching)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--use-caching") from exc
    if set_html_scope is not None and set_html_scope.strip().lower() not in SUPPORTED_HTML_SCOPES:
        raise typer.BadParameter(
            Messages.ERROR_HTML_SCOPE_INVALID.format(
                value=set_html_scope, allowed=", ".join(SUPPORTED_HTML_SCOPES)
            ),
            param_hint="--set-html-scope",
        )
    try:
        updates = apply_config_updates(
            state_dir=set_state_dir,
            cachefile=set_cachefile,
            clear_cachefile=clear_cachefile,
            use_caching=use_caching_value,
            html_scope=set_html_scope,
            entry_extensions=set_entry_ext,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if updates.changed:
        console.print(_styled(Messages.INFO_CONFIG_UPDATED, Styles.SUCCESS))
    if show or not updates.changed:
        snapshot = get_config_snapshot()
        console.print(
            _styled(
                Messages.INFO_CONFIG_SUMMARY.format(
                    state_dir=resolve_state_dir(snapshot),
                    cachefile=resolve_cache_file(snapshot),
                    use_caching="yes" if snapshot.use_caching else "no",
                    html_scope=snapshot.html_scope,
                    extensions=", ".join(snapshot.entry_extensions),
                ),
                Styles.INFO,
            )
        )


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    if argv is None:
        app()
    else:
        app(args=list(argv))
