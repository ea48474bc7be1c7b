"""Data types and collaborator contracts consumed by the picker core.

The search engine, scan status provider, file system and presentation sink
are all external. The core only relies on the small protocols below.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

GIT_STATUS_CLEAR = "clear"


@dataclass(frozen=True)
class Score:
    """Ranking breakdown reported by the search engine for one item."""

    total: int = 0
    base_score: int = 0
    filename_bonus: int = 0
    special_filename_bonus: int = 0
    frecency_boost: int = 0
    distance_penalty: int = 0
    relation_bonus: int = 0
    match_type: str = "unknown"

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> Score:
        """Build a score from an engine payload, ignoring keys it does not know."""
        return cls(**{key: value for key, value in data.items() if key in cls.__dataclass_fields__})


@dataclass(frozen=True)
class ResultItem:
    """One ranked file in a search response.

    Items are never mutated after a response is attached to the session; the
    whole list is swapped on every search.
    """

    path: str
    name: str = ""
    relative_path: str = ""
    directory: str = ""
    extension: str = ""
    size: int = 0
    modified: int = 0
    access_frecency_score: int = 0
    modification_frecency_score: int = 0
    total_frecency_score: int = 0
    git_status: str = GIT_STATUS_CLEAR
    is_current_file: bool = False
    score: Score | None = None

    @property
    def display_path(self) -> str:
        return self.relative_path or self.path

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> ResultItem:
        """Build an item from a loosely-typed engine payload.

        Unknown keys are ignored and missing ones take their defaults.
        """
        known = {name for name in cls.__dataclass_fields__}
        values = {key: value for key, value in data.items() if key in known}
        raw_score = values.get("score")
        if isinstance(raw_score, Mapping):
            values["score"] = Score.from_mapping(raw_score)
        if values.get("git_status") is None:
            values["git_status"] = GIT_STATUS_CLEAR
        return cls(**values)


@dataclass(frozen=True)
class SearchResponse:
    items: Sequence[ResultItem] = ()
    scores: Sequence[Score] | None = None
    total_matched: int = 0
    total_files: int = 0


@dataclass(frozen=True)
class ScanProgress:
    is_scanning: bool = False
    scanned: int = 0
    total: int = 0


NOT_SCANNING = ScanProgress()


@dataclass(frozen=True)
class FileStat:
    """Subset of ``os.stat_result`` the preview cache needs."""

    mtime_ns: int
    size: int
    atime_ns: int = 0
    is_file: bool = True


class SearchEngine(Protocol):
    def initialize(self, base_path: str | None) -> None: ...

    def search(self, query: str, max_results: int, hint: str | None) -> SearchResponse: ...

    def record_access(self, path: str) -> None: ...


class ScanStatusProvider(Protocol):
    def progress(self) -> ScanProgress: ...

    def start_scan(self) -> None: ...


class FileSystem(Protocol):
    def stat(self, path: str) -> FileStat | None: ...

    def read(self, path: str, max_lines: int) -> list[str]: ...


class PresentationSink(Protocol):
    """Write-only display surface; never a source of cache invalidation."""

    def open(self, show_file_info: bool) -> None: ...

    def render_list(self, lines: list[str], cursor_row: int | None) -> None: ...

    def render_preview(self, title: str, lines: list[str], content_kind: str) -> None: ...

    def render_status(self, text: str) -> None: ...

    def render_file_info(self, lines: list[str]) -> None: ...

    def scroll_preview(self, delta: int) -> None: ...

    def preview_height(self) -> int: ...

    def close(self) -> None: ...


@dataclass
class NullSink:
    """Sink that records nothing; handy for headless sessions."""

    preview_rows: int = 24
    closed: bool = field(default=False, init=False)
    show_file_info: bool = field(default=False, init=False)

    def open(self, show_file_info: bool) -> None:
        self.closed = False
        self.show_file_info = show_file_info

    def render_list(self, lines: list[str], cursor_row: int | None) -> None:
        pass

    def render_preview(self, title: str, lines: list[str], content_kind: str) -> None:
        pass

    def render_status(self, text: str) -> None:
        pass

    def render_file_info(self, lines: list[str]) -> None:
        pass

    def scroll_preview(self, delta: int) -> None:
        pass

    def preview_height(self) -> int:
        return self.preview_rows

    def close(self) -> None:
        self.closed = True


__all__ = [
    "FileStat",
    "FileSystem",
    "GIT_STATUS_CLEAR",
    "NOT_SCANNING",
    "NullSink",
    "PresentationSink",
    "ResultItem",
    "ScanProgress",
    "ScanStatusProvider",
    "Score",
    "SearchEngine",
    "SearchResponse",
]
