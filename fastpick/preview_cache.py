"""Bounded preview cache keyed by file path.

Entries remember the file's modification time at creation; lookups compare it
with the current one and drop the entry on mismatch. Nothing watches files in
the background, so staleness is only discovered when a path is looked up.

Order is insertion order with refresh on re-insert: writing a key again moves
it to the newest end, reading it does not. Eviction removes the oldest key.
"""

from __future__ import annotations

import logging
import os
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from .backend import FileStat, FileSystem
from .config import PreviewConfig
from .fileio import sanitize_preview_text

logger = logging.getLogger(__name__)

TEXT_KIND = "text"
BINARY_PROBE_LINES = 32

BINARY_EXTENSIONS = frozenset(
    {
        "jpg",
        "jpeg",
        "png",
        "gif",
        "bmp",
        "pdf",
        "zip",
        "rar",
        "7z",
        "tar",
        "gz",
        "exe",
        "dll",
        "so",
        "mp3",
        "mp4",
        "avi",
    }
)

EXTENSION_KINDS = {
    "js": "javascript",
    "jsx": "javascriptreact",
    "ts": "typescript",
    "tsx": "typescriptreact",
    "lua": "lua",
    "py": "python",
    "rs": "rust",
    "go": "go",
    "json": "json",
    "md": "markdown",
    "html": "html",
    "css": "css",
    "java": "java",
    "c": "c",
    "cpp": "cpp",
    "h": "c",
    "php": "php",
    "rb": "ruby",
    "sh": "bash",
    "vim": "vim",
    "yaml": "yaml",
    "yml": "yaml",
}

NOT_ACCESSIBLE_LINES = ("File not accessible",)
TOO_LARGE_LINES = ("File too large for preview",)
READ_FAILED_LINES = ("Failed to read file",)


@dataclass(frozen=True)
class PreviewCacheEntry:
    lines: tuple[str, ...]
    content_kind: str
    created_at: float
    mtime_ns: int


def file_extension(path: str) -> str:
    return os.path.splitext(path)[1].lstrip(".").lower()


def is_binary_extension(extension: str) -> bool:
    return extension.lower() in BINARY_EXTENSIONS


def detect_content_kind(path: str) -> str:
    """Return a highlighting tag for ``path``.

    The fixed extension table wins; other files fall back to the alias of the
    Pygments lexer registered for the filename.
    """
    known = EXTENSION_KINDS.get(file_extension(path))
    if known is not None:
        return known
    try:
        lexer = get_lexer_for_filename(os.path.basename(path))
    except ClassNotFound:
        return TEXT_KIND
    return lexer.aliases[0] if lexer.aliases else TEXT_KIND


def binary_placeholder_lines(path: str) -> tuple[str, ...]:
    return ("⚠ Binary File", "", f"File: {os.path.basename(path)}")


def _looks_binary(lines: list[str]) -> bool:
    return any("\x00" in line for line in lines[:BINARY_PROBE_LINES])


def build_cache_entry(
    path: str,
    fs: FileSystem,
    config: PreviewConfig,
    clock: Callable[[], float] = time.monotonic,
) -> PreviewCacheEntry:
    """Read ``path`` into a cache entry, substituting placeholders on failure.

    Oversized, binary, missing and unreadable files all yield a descriptive
    one-entry placeholder rather than an exception.
    """
    file_stat: FileStat | None = fs.stat(path)
    if file_stat is None:
        return PreviewCacheEntry(NOT_ACCESSIBLE_LINES, TEXT_KIND, clock(), 0)

    mtime_ns = file_stat.mtime_ns
    if file_stat.size > config.max_size:
        return PreviewCacheEntry(TOO_LARGE_LINES, TEXT_KIND, clock(), mtime_ns)

    if is_binary_extension(file_extension(path)):
        return PreviewCacheEntry(binary_placeholder_lines(path), TEXT_KIND, clock(), mtime_ns)

    try:
        lines = fs.read(path, config.max_lines)
    except (OSError, ValueError) as exc:
        logger.debug("preview read failed for %s: %s", path, exc)
        return PreviewCacheEntry(READ_FAILED_LINES, TEXT_KIND, clock(), mtime_ns)

    if _looks_binary(lines):
        return PreviewCacheEntry(binary_placeholder_lines(path), TEXT_KIND, clock(), mtime_ns)

    return PreviewCacheEntry(
        tuple(sanitize_preview_text(line) for line in lines[: config.max_lines]),
        detect_content_kind(path),
        clock(),
        mtime_ns,
    )


class PreviewCache:
    """FIFO-with-refresh cache holding at most ``max_size`` entries.

    Also carries ``pending_path``, the single path currently awaiting an async
    load, so that clearing the cache discards in-flight work in one step.
    """

    def __init__(self, max_size: int, stat: Callable[[str], FileStat | None]) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._stat = stat
        self._entries: OrderedDict[str, PreviewCacheEntry] = OrderedDict()
        self.pending_path: str | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def keys(self) -> Iterator[str]:
        """Iterate cached paths from oldest to newest."""
        return iter(list(self._entries))

    def _is_valid(self, path: str, entry: PreviewCacheEntry) -> bool:
        file_stat = self._stat(path)
        if file_stat is None:
            return False
        return file_stat.mtime_ns == entry.mtime_ns

    def get(self, path: str) -> PreviewCacheEntry | None:
        """Return a still-valid entry for ``path``; drop it if stale."""
        entry = self._entries.get(path)
        if entry is None:
            return None
        if self._is_valid(path, entry):
            return entry
        del self._entries[path]
        logger.debug("dropped stale preview for %s", path)
        return None

    def put(self, path: str, entry: PreviewCacheEntry) -> None:
        self._entries.pop(path, None)
        if len(self._entries) >= self.max_size:
            oldest, _ = self._entries.popitem(last=False)
            logger.debug("evicted preview for %s", oldest)
        self._entries[path] = entry

    def cancel_pending(self) -> None:
        self.pending_path = None

    def clear(self) -> None:
        self._entries = OrderedDict()
        self.pending_path = None


__all__ = [
    "BINARY_EXTENSIONS",
    "PreviewCache",
    "PreviewCacheEntry",
    "build_cache_entry",
    "detect_content_kind",
    "is_binary_extension",
]
