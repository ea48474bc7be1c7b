"""Deterministic stand-ins for picker collaborators used across tests."""

from __future__ import annotations

from collections.abc import Callable

from fastpick.backend import FileStat, ResultItem, ScanProgress, SearchResponse
from fastpick.scheduler import Scheduler


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.now += seconds


def make_scheduler(clock: FakeClock | None = None) -> tuple[Scheduler, FakeClock]:
    clock = clock or FakeClock()
    return Scheduler(monotonic=clock, sleep=clock.sleep), clock


class FakeFileSystem:
    def __init__(self) -> None:
        self.files: dict[str, tuple[list[str], int, int]] = {}
        self.unreadable: set[str] = set()
        self.reads: list[str] = []

    def add(self, path: str, lines: list[str], mtime_ns: int = 1, size: int | None = None) -> None:
        if size is None:
            size = sum(len(line) + 1 for line in lines)
        self.files[path] = (list(lines), mtime_ns, size)

    def touch(self, path: str, mtime_ns: int) -> None:
        lines, _, size = self.files[path]
        self.files[path] = (lines, mtime_ns, size)

    def remove(self, path: str) -> None:
        self.files.pop(path, None)

    def stat(self, path: str) -> FileStat | None:
        entry = self.files.get(path)
        if entry is None:
            return None
        _, mtime_ns, size = entry
        return FileStat(mtime_ns=mtime_ns, size=size)

    def read(self, path: str, max_lines: int) -> list[str]:
        self.reads.append(path)
        if path in self.unreadable or path not in self.files:
            raise OSError(f"cannot read {path}")
        return list(self.files[path][0][:max_lines])


class RecordingSink:
    def __init__(self, preview_rows: int = 20) -> None:
        self.preview_rows = preview_rows
        self.lists: list[tuple[list[str], int | None]] = []
        self.previews: list[tuple[str, list[str], str]] = []
        self.statuses: list[str] = []
        self.file_infos: list[list[str]] = []
        self.scrolls: list[int] = []
        self.open_calls: list[bool] = []
        self.open_error: Exception | None = None
        self.is_open = False
        self.renders_while_closed = 0
        self.close_count = 0

    def _rendered(self) -> None:
        if not self.is_open:
            self.renders_while_closed += 1

    def open(self, show_file_info: bool) -> None:
        self.open_calls.append(show_file_info)
        if self.open_error is not None:
            raise self.open_error
        self.is_open = True

    def render_list(self, lines: list[str], cursor_row: int | None) -> None:
        self._rendered()
        self.lists.append((list(lines), cursor_row))

    def render_preview(self, title: str, lines: list[str], content_kind: str) -> None:
        self._rendered()
        self.previews.append((title, list(lines), content_kind))

    def render_status(self, text: str) -> None:
        self._rendered()
        self.statuses.append(text)

    def render_file_info(self, lines: list[str]) -> None:
        self._rendered()
        self.file_infos.append(list(lines))

    def scroll_preview(self, delta: int) -> None:
        self.scrolls.append(delta)

    def preview_height(self) -> int:
        return self.preview_rows

    def close(self) -> None:
        self.is_open = False
        self.close_count += 1


def item(path: str, **kwargs) -> ResultItem:
    name = path.rsplit("/", 1)[-1]
    directory = path.rsplit("/", 1)[0] if "/" in path else ""
    kwargs.setdefault("name", name)
    kwargs.setdefault("relative_path", path)
    kwargs.setdefault("directory", directory)
    return ResultItem(path=path, **kwargs)


class FakeEngine:
    def __init__(self, paths: list[str] | None = None, total_files: int | None = None) -> None:
        self.paths = list(paths or [])
        self.total_files = total_files if total_files is not None else len(self.paths)
        self.searches: list[str] = []
        self.accessed: list[str] = []
        self.initialized: list[str | None] = []
        self.search_error: Exception | None = None
        self.init_error: Exception | None = None
        self.respond: Callable[[str], SearchResponse] | None = None

    def initialize(self, base_path: str | None) -> None:
        self.initialized.append(base_path)
        if self.init_error is not None:
            raise self.init_error

    def search(self, query: str, max_results: int, hint: str | None) -> SearchResponse:
        self.searches.append(query)
        if self.search_error is not None:
            raise self.search_error
        if self.respond is not None:
            return self.respond(query)
        matched = [path for path in self.paths if query.lower() in path.lower()]
        return SearchResponse(
            items=[item(path) for path in matched[:max_results]],
            total_matched=len(matched),
            total_files=self.total_files,
        )

    def record_access(self, path: str) -> None:
        self.accessed.append(path)


class FakeScanStatus:
    """Reports ``is_scanning`` for the first ``scanning_polls`` reads."""

    def __init__(self, scanning_polls: int = 0, total: int = 0) -> None:
        self.remaining = scanning_polls
        self.total = total
        self.reads = 0
        self.scans_started = 0
        self.error: Exception | None = None

    def progress(self) -> ScanProgress:
        self.reads += 1
        if self.error is not None:
            raise self.error
        if self.remaining > 0:
            self.remaining -= 1
            return ScanProgress(is_scanning=True, scanned=0, total=self.total)
        return ScanProgress(is_scanning=False, scanned=self.total, total=self.total)

    def start_scan(self) -> None:
        self.scans_started += 1


class ManualScanStatus:
    """Reports whatever ``scanning`` is set to, however often it is read."""

    def __init__(self, scanning: bool = True, total: int = 0) -> None:
        self.scanning = scanning
        self.total = total
        self.scans_started = 0

    def progress(self) -> ScanProgress:
        scanned = 0 if self.scanning else self.total
        return ScanProgress(is_scanning=self.scanning, scanned=scanned, total=self.total)

    def start_scan(self) -> None:
        self.scans_started += 1
