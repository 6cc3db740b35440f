"""Centralized user-facing text for the filestats CLI."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "filestats – cache size, MIME type and word counts for site content files."
    HELP_VERSION = "Show version and exit."
    HELP_VERBOSE = "Log reindexing decisions to stderr."
    HELP_INDEX_PATH = "Data directory whose files will be indexed."
    HELP_REINDEX_ALL = "Discard the cached stats and rescan every file."
    HELP_REINDEX = "Additive reindex: scan files missing from the cache (default)."
    HELP_REINDEX_CAT = "Rescan every file under the given category (e.g. stories/buffy)."
    HELP_DELINDEX = "Drop cached stats for files that no longer exist."
    HELP_NO_CACHE = "Scan without reading or writing the stats cache."
    HELP_INCLUDE_HIDDEN = "Include hidden files and directories."
    HELP_NO_RESPECT_GITIGNORE = "Do not skip paths matched by the data directory .gitignore."
    HELP_EXCLUDE_PATTERNS = "Exclude paths matching a gitignore-style pattern (repeatable)."
    HELP_SHOW_CATEGORY = "Only list cached files under this category."
    HELP_CLEAR = "Remove the stats cache file."
    HELP_CONFIG = "Show or update the filestats configuration."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_STATE_DIR = "Directory holding the stats cache (default ~/.filestats/state)."
    HELP_SET_CACHEFILE = "Explicit path of the stats cache file."
    HELP_CLEAR_CACHEFILE = "Forget the explicit cache file path and use the state directory default."
    HELP_USE_CACHING = "Enable or disable the stats cache (true/false)."
    HELP_SET_HTML_SCOPE = "Which part of HTML files is word-counted: body or document."
    HELP_SET_ENTRY_EXT = "Extensions treated as entry files (repeatable, e.g. .txt)."

    ERROR_BOOLEAN_INVALID = "Invalid boolean value '{value}'. Use true/false."
    ERROR_HTML_SCOPE_INVALID = "Unsupported HTML scope '{value}'. Allowed values: {allowed}."
    ERROR_SAVE_FAILED = "Unable to save the stats cache at {path}: {reason}"
    ERROR_EXTENSIONS_EMPTY = "At least one non-empty entry extension is required."

    INFO_INDEX_RUNNING = "Indexing file stats under {path}..."
    INFO_INDEX_MODE = "Mode: {mode}"
    INFO_INDEX_SUMMARY = "Scanned {scanned} file(s), removed {deleted} stale entr{plural}; {total} file(s) cached."
    INFO_INDEX_SAVED = "Stats cache saved to {path}."
    INFO_INDEX_UP_TO_DATE = "Stats cache already matches the data directory; nothing to do."
    INFO_INDEX_UNCACHED = "Caching disabled; stats were computed but not saved."
    INFO_CATEGORY_UNKNOWN = "Unknown category '{category}'; ignoring the category reindex."
    INFO_SHOW_HEADER = "Cached file stats from {path} (generated {generated})"
    INFO_SHOW_EMPTY = "No cached file stats found at {path}."
    INFO_CLEARED = "Removed {count} cached entr{plural} from {path}."
    INFO_CLEAR_NONE = "No stats cache found at {path}."
    INFO_CONFIG_UPDATED = "Configuration updated."
    INFO_CONFIG_SUMMARY = (
        "State dir: {state_dir}\n"
        "Cache file: {cachefile}\n"
        "Use caching: {use_caching}\n"
        "HTML word-count scope: {html_scope}\n"
        "Entry extensions: {extensions}"
    )

    TABLE_TITLE = "File stats"
    TABLE_HEADER_PATH = "File path"
    TABLE_HEADER_SIZE = "Size"
    TABLE_HEADER_MIME = "MIME type"
    TABLE_HEADER_WORDS = "Words"
    TABLE_HEADER_MTIME = "Modified"
