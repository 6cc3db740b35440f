"""Logic helpers for the `filestats config` command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..config import (
    Config,
    load_config,
    set_cachefile,
    set_entry_extensions,
    set_html_scope,
    set_state_dir,
    set_use_caching,
)


@dataclass(slots=True)
class ConfigUpdateResult:
    state_dir_set: bool = False
    cachefile_set: bool = False
    cachefile_cleared: bool = False
    use_caching_set: bool = False
    html_scope_set: bool = False
    entry_extensions_set: bool = False

    @property
    def changed(self) -> bool:
        return any(
            (
                self.state_dir_set,
                self.cachefile_set,
                self.cachefile_cleared,
                self.use_caching_set,
                self.html_scope_set,
                self.entry_extensions_set,
            )
        )


def apply_config_updates(
    *,
    state_dir: Path | str | None = None,
    cachefile: Path | str | None = None,
    clear_cachefile: bool = False,
    use_caching: bool | None = None,
    html_scope: str | None = None,
    entry_extensions: Sequence[str] | None = None,
) -> ConfigUpdateResult:
    """Apply config mutations and report which fields were updated."""

    result = ConfigUpdateResult()
    if state_dir is not None:
        set_state_dir(state_dir)
        result.state_dir_set = True
    if cachefile is not None:
        set_cachefile(cachefile)
        result.cachefile_set = True
    if clear_cachefile:
        set_cachefile(None)
        result.cachefile_cleared = True
    if use_caching is not None:
        set_use_caching(use_caching)
        result.use_caching_set = True
    if html_scope is not None:
        set_html_scope(html_scope)
        result.html_scope_set = True
    if entry_extensions:
        set_entry_extensions(entry_extensions)
        result.entry_extensions_set = True
    return result


def get_config_snapshot() -> Config:
    """Return the current configuration dataclass."""

    return load_config()
