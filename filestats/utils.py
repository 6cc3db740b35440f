"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence
import os

from .services.index_service import EntryFile, FileUniverse, OtherFile


def resolve_directory(path: Path | str) -> Path:
    """Resolve and validate a user supplied directory path."""
    dir_path = Path(path).expanduser().resolve()
    if not dir_path.exists():
        raise FileNotFoundError(f"Directory does not exist: {dir_path}")
    if not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    return dir_path


def normalize_extensions(values: Iterable[str] | None) -> tuple[str, ...]:
    """Return a sorted, deduplicated tuple of normalized file extensions."""

    if not values:
        return ()

    normalized: list[str] = []
    seen: set[str] = set()
    for raw in values:
        if raw is None:
            continue
        for piece in raw.replace(",", " ").split():
            token = piece.strip().lower()
            if not token.startswith("."):
                token = f".{token}"
            if token == ".":
                continue
            if token not in seen:
                seen.add(token)
                normalized.append(token)
    return tuple(sorted(normalized))


def _relative_posix(path: Path, root: Path) -> str:
    rel = path.relative_to(root)
    if rel == Path("."):
        return ""
    return rel.as_posix()


def _read_gitignore_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return []


def build_exclude_spec(
    root: Path,
    *,
    respect_gitignore: bool = True,
    exclude_patterns: Sequence[str] | None = None,
):
    """Return a GitIgnoreSpec for the data directory, or None if nothing is excluded."""

    from pathspec.gitignore import GitIgnoreSpec

    lines: list[str] = []
    if respect_gitignore:
        gitignore_file = root / ".gitignore"
        if gitignore_file.is_file():
            lines.extend(_read_gitignore_lines(gitignore_file))
    lines.extend(pattern for pattern in (exclude_patterns or ()) if pattern.strip())
    if not lines:
        return None
    return GitIgnoreSpec.from_lines(lines)


def _is_excluded(spec, rel_path: str, *, is_dir: bool) -> bool:
    if spec is None or not rel_path:
        return False
    candidate = f"{rel_path}/" if is_dir else rel_path
    return spec.match_file(candidate)


def _matches_extension(name: str, extensions: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(lowered.endswith(ext) for ext in extensions)


def collect_universe(
    data_dir: Path | str,
    *,
    entry_extensions: Sequence[str],
    include_hidden: bool = False,
    respect_gitignore: bool = True,
    exclude_patterns: Sequence[str] | None = None,
) -> FileUniverse:
    """Walk *data_dir* and split its contents into entry and other files.

    Files with one of *entry_extensions* are entries; all other files and
    every sub-directory are "others". A record's category is its parent
    directory relative to *data_dir* ("" for the top level).
    """

    root = resolve_directory(data_dir)
    extensions = normalize_extensions(entry_extensions)
    spec = build_exclude_spec(
        root,
        respect_gitignore=respect_gitignore,
        exclude_patterns=exclude_patterns,
    )
    entries: list[EntryFile] = []
    others: list[OtherFile] = []
    categories: set[str] = {""}

    for dirpath, dirnames, filenames in os.walk(root, topdown=True):
        current_dir = Path(dirpath)
        category = _relative_posix(current_dir, root)
        if not include_hidden:
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            filenames = [f for f in filenames if not f.startswith(".")]
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d != ".git"
            and not _is_excluded(spec, _relative_posix(current_dir / d, root), is_dir=True)
        )
        for dirname in dirnames:
            child = current_dir / dirname
            categories.add(_relative_posix(child, root))
            others.append(OtherFile(path=str(child), category=category))

        for filename in sorted(filenames):
            candidate = current_dir / filename
            if _is_excluded(spec, _relative_posix(candidate, root), is_dir=False):
                continue
            if extensions and _matches_extension(filename, extensions):
                try:
                    mtime = int(candidate.stat().st_mtime)
                except OSError:
                    continue
                entries.append(EntryFile(path=str(candidate), category=category, mtime=mtime))
            else:
                others.append(OtherFile(path=str(candidate), category=category))

    return FileUniverse(entries=entries, others=others, categories=frozenset(categories))


def format_path(path: Path | str, base: Path | None = None) -> str:
    """Return a user friendly representation of *path* relative to *base* when possible."""
    path = Path(path)
    if base:
        try:
            relative = path.relative_to(base)
            return f"./{relative.as_posix()}"
        except ValueError:
            return str(path)
    return str(path)
