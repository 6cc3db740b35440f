"""Per-file statistics: size strings, MIME sniffing and word counts."""

from __future__ import annotations

import logging
import os
import re
import stat
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Mapping

from charset_normalizer import from_path

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "text/plain"
HTML_SCOPES: tuple[str, ...] = ("body", "document")
_MEGABYTE = 1048576
_KILOBYTE = 1024

_BODY_RE = re.compile(r"<body[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>", re.DOTALL)
_SPACE_RUN_RE = re.compile(r"\s\s+")

MimeDetector = Callable[[str], str]

_magic_missing_logged = False


@dataclass(frozen=True, slots=True)
class StatEntry:
    size: int
    size_string: str
    mime_type: str
    word_count: int
    mtime: int

    def to_dict(self) -> dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "StatEntry":
        return cls(
            size=int(data["size"]),
            size_string=str(data["size_string"]),
            mime_type=str(data["mime_type"]),
            word_count=int(data["word_count"]),
            mtime=int(data["mtime"]),
        )


def size_string(size: int) -> str:
    """Return a human-friendly size such as ``512b``, ``3K`` or ``1.5M``."""

    if size >= _MEGABYTE:
        return f"{size / _MEGABYTE:.1f}M"
    if size >= _KILOBYTE:
        return f"{size // _KILOBYTE}K"
    return f"{size}b"


def detect_mime_type(path: Path | str) -> str:
    """Sniff the MIME type of *path* from its content via libmagic."""

    global _magic_missing_logged
    try:
        import magic
    except ImportError as exc:
        if not _magic_missing_logged:
            logger.debug("libmagic unavailable (%s); assuming %s", exc, DEFAULT_MIME_TYPE)
            _magic_missing_logged = True
        return DEFAULT_MIME_TYPE
    try:
        detected = magic.from_file(str(path), mime=True)
    except (OSError, magic.MagicException) as exc:
        logger.debug("MIME detection failed for %s: %s", path, exc)
        return DEFAULT_MIME_TYPE
    return detected or DEFAULT_MIME_TYPE


def _read_text(path: Path | str) -> str | None:
    """Decode *path* with the best guessed charset, or None if unreadable."""

    try:
        result = from_path(Path(path))
    except OSError:
        return None
    best = result.best() if result is not None else None
    if best is None:
        return None
    return str(best)


def _html_words(data: str, scope: str) -> list[str]:
    if scope == "document":
        body = data
    else:
        match = _BODY_RE.search(data)
        body = match.group(1) if match else ""
    body = _TAG_RE.sub("", body)
    body = _SPACE_RUN_RE.sub(" ", body)
    return body.split()


def word_count(path: Path | str, mime_type: str, *, html_scope: str = "body") -> int:
    """Count words of plain-text and HTML files; other types count as zero.

    HTML files only count the text inside ``<body>`` unless *html_scope* is
    ``"document"``. Files that cannot be read count as zero.
    """

    if mime_type.startswith("text/plain"):
        data = _read_text(path)
        if data is None:
            return 0
        return len(data.split())
    if mime_type.startswith("text/html"):
        data = _read_text(path)
        if data is None:
            return 0
        return len(_html_words(data, html_scope))
    return 0


def scan_file(
    path: Path | str,
    *,
    detect_mime: MimeDetector | None = None,
    html_scope: str = "body",
) -> StatEntry | None:
    """Return the stats of *path*, or None when it is not a regular file."""

    try:
        st = os.stat(path)
    except OSError:
        return None
    if not stat.S_ISREG(st.st_mode):
        return None
    detector = detect_mime if detect_mime is not None else detect_mime_type
    mime_type = detector(str(path)) or DEFAULT_MIME_TYPE
    return StatEntry(
        size=st.st_size,
        size_string=size_string(st.st_size),
        mime_type=mime_type,
        word_count=word_count(path, mime_type, html_scope=html_scope),
        mtime=int(st.st_mtime),
    )
