"""Picker session lifecycle and the state it owns.

A ``PickerSession`` moves through CLOSED -> OPENING -> ACTIVE -> CLOSING ->
CLOSED. While ACTIVE it owns the result list, the debounce timer, the render
scheduler, the scan monitor and the preview cache; closing releases all of
them so the next open starts from scratch.

Nothing here blocks: search and file reads run from scheduler callbacks and
every collaborator failure is turned into a notice plus placeholder output.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace

from .backend import (
    FileSystem,
    NullSink,
    PresentationSink,
    ResultItem,
    ScanStatusProvider,
    Score,
    SearchEngine,
    SearchResponse,
)
from .config import PickerConfig
from .debounce import DebounceCallbacks, QueryDebounceController
from .fileio import LocalFileSystem
from .log import configure_logging
from .preview_cache import PreviewCache
from .preview_loader import AsyncPreviewLoader
from .render_scheduler import RenderScheduler
from .rendering import clamp_top, format_status, render_list_lines
from .scan_monitor import ScanProgressMonitor, safe_progress
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

VALID_ACTIONS = ("edit", "split", "vsplit", "tab")


class SessionPhase(enum.Enum):
    CLOSED = "closed"
    OPENING = "opening"
    ACTIVE = "active"
    CLOSING = "closing"


@dataclass
class SessionState:
    query: str = ""
    items: list[ResultItem] = field(default_factory=list)
    cursor: int = 1
    top: int = 1
    total_matched: int = 0
    total_files: int = 0
    last_status: str | None = None
    current_file: str | None = None

    def clamp_cursor(self) -> None:
        """Keep the 1-based cursor inside ``[1, len(items)]`` (1 when empty)."""
        if not self.items:
            self.cursor = 1
        else:
            self.cursor = max(1, min(self.cursor, len(self.items)))

    def selected_item(self) -> ResultItem | None:
        if not self.items or self.cursor > len(self.items):
            return None
        return self.items[self.cursor - 1]


def _log_notice(message: str, level: int) -> None:
    logger.log(level, message)


def _coerce_response(raw: object) -> SearchResponse:
    """Accept either a ``SearchResponse`` or an ``{items, scores?}`` mapping."""
    if isinstance(raw, SearchResponse):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"unexpected search response type {type(raw).__name__}")

    items = [
        item if isinstance(item, ResultItem) else ResultItem.from_mapping(item)
        for item in raw.get("items") or ()
    ]
    raw_scores = raw.get("scores")
    scores = None
    if raw_scores is not None:
        scores = [score if isinstance(score, Score) else Score.from_mapping(score) for score in raw_scores]
    return SearchResponse(
        items=items,
        scores=scores,
        total_matched=int(raw.get("total_matched") or len(items)),
        total_files=int(raw.get("total_files") or 0),
    )


def merge_scores(response: SearchResponse) -> list[ResultItem]:
    """Attach scores to items when the engine returned one per item."""
    items = list(response.items)
    scores = response.scores
    if scores is None or len(scores) != len(items):
        return items
    return [replace(item, score=score) for item, score in zip(items, scores)]


class PickerSession:
    def __init__(
        self,
        engine: SearchEngine,
        scan_status: ScanStatusProvider,
        sink: PresentationSink | None = None,
        config: PickerConfig | None = None,
        fs: FileSystem | None = None,
        scheduler: Scheduler | None = None,
        on_select: Callable[[str, str], None] | None = None,
        notify: Callable[[str, int], None] | None = None,
    ) -> None:
        self.engine = engine
        self.scan_status = scan_status
        self.sink = sink if sink is not None else NullSink()
        self.config = config if config is not None else PickerConfig()
        self.fs = fs if fs is not None else LocalFileSystem()
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.on_select = on_select
        self.notify = notify if notify is not None else _log_notice
        self.phase = SessionPhase.CLOSED
        self.state = SessionState()
        if self.config.logging.enabled:
            configure_logging(self.config.logging)
        self._base_path: str | None = self.config.base_path
        self._build_components()

    def _build_components(self) -> None:
        self.cache = PreviewCache(self.config.preview.cache_size, self.fs.stat)
        self.loader = AsyncPreviewLoader(
            self.scheduler,
            self.cache,
            self.fs,
            self.sink,
            self.config,
            notify=self.notify,
            clock=self.scheduler.now,
        )
        self.debounce = QueryDebounceController(
            self.scheduler,
            DebounceCallbacks(
                refresh_results=self.refresh_results,
                render_list=self.render_list,
                update_preview=self.update_preview,
                update_status=self.update_status,
            ),
            interval_seconds=self.config.preview.debounce_seconds,
            max_query_length=self.config.max_query_length,
            is_active=lambda: self.active,
            notify=self.notify,
        )
        self.renderer = RenderScheduler(self.scheduler, self.render_complete_ui)
        self.monitor = ScanProgressMonitor(
            self.scheduler,
            self.scan_status.progress,
            is_active=lambda: self.active,
            on_scanning=self.update_status,
            on_complete=self.renderer.request_render,
            poll_seconds=self.config.scan_poll_seconds,
        )

    @property
    def active(self) -> bool:
        return self.phase is SessionPhase.ACTIVE

    # Lifecycle

    def open(self, base_path: str | None = None, current_file: str | None = None) -> bool:
        """Open the picker; ``False`` when the search backend or the UI fails to start."""
        if self.phase is SessionPhase.ACTIVE:
            return True
        if self.phase is not SessionPhase.CLOSED:
            logger.debug("ignoring open while %s", self.phase.value)
            return False

        self.phase = SessionPhase.OPENING
        target = base_path if base_path is not None else self._base_path
        try:
            self.engine.initialize(target)
        except Exception as exc:
            self.phase = SessionPhase.CLOSED
            self.notify(f"Failed to initialize file picker for {target or 'current directory'}: {exc}", logging.ERROR)
            return False
        self._base_path = target

        try:
            self.sink.open(self.config.show_scores)
        except Exception as exc:
            self.phase = SessionPhase.CLOSED
            self.notify(f"Failed to create picker UI: {exc}", logging.ERROR)
            return False

        self.state = SessionState(current_file=current_file)
        self._build_components()
        self.phase = SessionPhase.ACTIVE

        self.renderer.request_render()
        if self.config.preview.enabled:
            self.loader.clear_preview()
        self.update_status()

        if not safe_progress(self.scan_status.progress).is_scanning:
            try:
                self.scan_status.start_scan()
            except Exception as exc:
                self.notify(f"Failed to start file scan: {exc}", logging.WARNING)
        self.monitor.start()
        logger.debug("picker session opened for %s", target)
        return True

    def close(self) -> None:
        if self.phase is not SessionPhase.ACTIVE:
            return
        self.phase = SessionPhase.CLOSING

        self.debounce.reset()
        self.renderer.cancel()
        self.monitor.stop()
        self.loader.reset()
        self.cache.clear()
        self.state = SessionState()
        try:
            self.sink.close()
        except Exception:
            logger.warning("presentation sink failed to close", exc_info=True)

        self.phase = SessionPhase.CLOSED
        logger.debug("picker session closed")

    # Input

    def on_query_changed(self, query: str) -> bool:
        if not self.active:
            return False
        if not self.debounce.on_query_changed(query):
            return False
        self.state.query = query
        self.renderer.request_render()
        return True

    def move_up(self) -> bool:
        return self._move_cursor(-1)

    def move_down(self) -> bool:
        return self._move_cursor(1)

    def _move_cursor(self, delta: int) -> bool:
        if not self.active or not self.state.items:
            return False
        new_cursor = max(1, min(self.state.cursor + delta, len(self.state.items)))
        if new_cursor == self.state.cursor:
            return False
        self.state.cursor = new_cursor
        self.debounce.schedule_update()
        return True

    def scroll_preview_up(self) -> None:
        self._scroll_preview(-1)

    def scroll_preview_down(self) -> None:
        self._scroll_preview(1)

    def _scroll_preview(self, direction: int) -> None:
        if not self.active or not self.config.preview.enabled:
            return
        half_page = max(1, self.sink.preview_height() // 2)
        self.sink.scroll_preview(direction * half_page)

    def select(self, action: str = "edit") -> bool:
        """Close the picker and hand the selected path to ``on_select``."""
        if not self.active:
            return False
        item = self.state.selected_item()
        if item is None:
            return False
        if action not in VALID_ACTIONS:
            self.notify(f"Invalid action: {action}", logging.ERROR)
            return False
        if not item.path:
            self.notify("Invalid file path", logging.ERROR)
            return False

        try:
            self.engine.record_access(item.relative_path or item.path)
        except Exception as exc:
            logger.debug("failed to record access for %s: %s", item.path, exc)

        self.close()
        if self.on_select is not None:
            self.on_select(item.path, action)
        return True

    def toggle_debug(self) -> None:
        """Flip score display and rebuild the session around the same results."""
        if not self.active:
            return
        show_scores = not self.config.show_scores
        self.notify(f"Debug scores {'enabled' if show_scores else 'disabled'}", logging.INFO)

        previous = self.state
        self.close()
        self.config = self.config.with_show_scores(show_scores)
        if not self.open(current_file=previous.current_file):
            return

        self.state.query = previous.query
        self.state.items = previous.items
        self.state.cursor = previous.cursor
        self.state.total_matched = previous.total_matched
        self.state.total_files = previous.total_files
        self.render_list()
        self.update_preview()
        self.update_status()

    # Rendering

    def render_complete_ui(self) -> None:
        """Full render requested through the render scheduler."""
        if not self.active:
            return
        self.debounce.request_refresh()

    def request_refresh(self) -> None:
        if self.active:
            self.renderer.request_render()

    def refresh_results(self) -> None:
        """Run the search for the current query and replace the result list."""
        if not self.active:
            return
        state = self.state
        try:
            response = _coerce_response(
                self.engine.search(state.query, self.config.max_results, state.current_file)
            )
        except Exception as exc:
            self.notify(f"Search failed: {exc}", logging.WARNING)
            response = SearchResponse()

        state.items = merge_scores(response)
        state.total_matched = response.total_matched or len(state.items)
        state.total_files = response.total_files
        state.clamp_cursor()
        state.top = 1

    def render_list(self) -> None:
        if not self.active:
            return
        state = self.state
        height = self.config.list_height
        state.top = clamp_top(state.cursor, state.top, height, len(state.items))
        lines, cursor_row = render_list_lines(
            state.items,
            state.cursor,
            state.top,
            height,
            self.config.max_path_width,
            show_scores=self.config.show_scores,
        )
        self.sink.render_list(lines, cursor_row)

    def update_preview(self) -> None:
        if not self.active or not self.config.preview.enabled:
            return
        item = self.state.selected_item()
        if item is None:
            self.loader.clear_preview()
            return
        self.loader.request_preview(item)

    def update_status(self) -> None:
        """Render scan/match status, skipping the sink when nothing changed."""
        if not self.active:
            return
        progress = safe_progress(self.scan_status.progress)
        total_files = progress.total or self.state.total_files
        status = format_status(progress, self.state.total_matched, total_files)
        if status == self.state.last_status:
            return
        self.state.last_status = status
        self.sink.render_status(status)


__all__ = ["PickerSession", "SessionPhase", "SessionState", "VALID_ACTIONS", "merge_scores"]
