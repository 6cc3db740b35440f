"""Global configuration management for filestats."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict

from .stats import HTML_SCOPES
from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".filestats"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "filestats_config_dir_override",
    default=None,
)
CACHE_FILENAME = "file_stats.dat"
STATE_DIRNAME = "state"
DEFAULT_HTML_SCOPE = "body"
SUPPORTED_HTML_SCOPES = HTML_SCOPES
DEFAULT_ENTRY_EXTENSIONS: tuple[str, ...] = (".txt", ".html")


@dataclass
class Config:
    state_dir: Path | None = None
    file_stats_cachefile: Path | None = None
    use_caching: bool = True
    html_scope: str = DEFAULT_HTML_SCOPE
    entry_extensions: tuple[str, ...] = DEFAULT_ENTRY_EXTENSIONS


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def _coerce_path(value: object) -> Path | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser()


def _coerce_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"1", "true", "t", "yes", "y", "on"}:
            return True
        if token in {"0", "false", "f", "no", "n", "off"}:
            return False
        return default
    return bool(value)


def _coerce_html_scope(value: object) -> str:
    scope = str(value or DEFAULT_HTML_SCOPE).strip().lower()
    if scope not in SUPPORTED_HTML_SCOPES:
        return DEFAULT_HTML_SCOPE
    return scope


def _coerce_extensions(value: object) -> tuple[str, ...]:
    if not value:
        return DEFAULT_ENTRY_EXTENSIONS
    if isinstance(value, str):
        value = value.split(",")
    from .utils import normalize_extensions  # local import avoids a cycle

    normalized = normalize_extensions(value)  # type: ignore[arg-type]
    return normalized or DEFAULT_ENTRY_EXTENSIONS


def _config_from_mapping(raw: Mapping[str, object]) -> Config:
    return Config(
        state_dir=_coerce_path(raw.get("state_dir")),
        file_stats_cachefile=_coerce_path(raw.get("file_stats_cachefile")),
        use_caching=_coerce_bool(raw.get("use_caching"), True),
        html_scope=_coerce_html_scope(raw.get("html_scope")),
        entry_extensions=_coerce_extensions(raw.get("entry_extensions")),
    )


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    try:
        raw = json.loads(config_file.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return Config()
    if not isinstance(raw, dict):
        return Config()
    return _config_from_mapping(raw)


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    if config.state_dir is not None:
        data["state_dir"] = str(config.state_dir)
    if config.file_stats_cachefile is not None:
        data["file_stats_cachefile"] = str(config.file_stats_cachefile)
    data["use_caching"] = bool(config.use_caching)
    data["html_scope"] = config.html_scope
    data["entry_extensions"] = list(config.entry_extensions)
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def resolve_state_dir(config: Config) -> Path:
    """Return the directory holding runtime state such as the stats cache."""

    if config.state_dir is not None:
        return Path(config.state_dir).expanduser()
    return _resolve_config_dir() / STATE_DIRNAME


def resolve_cache_file(config: Config) -> Path:
    """Return the stats cache path, defaulting to ``<state_dir>/file_stats.dat``."""

    if config.file_stats_cachefile is not None:
        return Path(config.file_stats_cachefile).expanduser()
    return resolve_state_dir(config) / CACHE_FILENAME


def set_state_dir(value: Path | str | None) -> None:
    config = load_config()
    save_config(replace(config, state_dir=_coerce_path(value)))


def set_cachefile(value: Path | str | None) -> None:
    config = load_config()
    save_config(replace(config, file_stats_cachefile=_coerce_path(value)))


def set_use_caching(value: bool) -> None:
    config = load_config()
    save_config(replace(config, use_caching=bool(value)))


def set_html_scope(value: str) -> None:
    scope = (value or "").strip().lower()
    if scope not in SUPPORTED_HTML_SCOPES:
        raise ValueError(
            Messages.ERROR_HTML_SCOPE_INVALID.format(
                value=value, allowed=", ".join(SUPPORTED_HTML_SCOPES)
            )
        )
    config = load_config()
    save_config(replace(config, html_scope=scope))


def set_entry_extensions(values) -> None:
    from .utils import normalize_extensions  # local import avoids a cycle

    normalized = normalize_extensions(values)
    if not normalized:
        raise ValueError(Messages.ERROR_EXTENSIONS_EMPTY)
    config = load_config()
    save_config(replace(config, entry_extensions=normalized))
