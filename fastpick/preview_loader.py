"""Latest-request-wins preview loading on the cooperative scheduler."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .backend import FileSystem, PresentationSink, ResultItem
from .config import PickerConfig
from .file_info import PLACEHOLDER_LINES, file_info_lines
from .preview_cache import PreviewCache, PreviewCacheEntry, build_cache_entry
from .rendering import (
    DEFAULT_PREVIEW_TITLE,
    NO_PREVIEW_LINES,
    failed_preview_lines,
    loading_preview_lines,
    preview_title,
)
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

PREVIEW_TITLE_WIDTH = 60


class AsyncPreviewLoader:
    """Load previews one tick after they are requested.

    A single displayed-target marker (plus the cache's pending marker)
    replaces locking: a deferred load whose path no longer matches both
    markers was superseded and is dropped without touching cache or sink.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        cache: PreviewCache,
        fs: FileSystem,
        sink: PresentationSink,
        config: PickerConfig,
        notify: Callable[[str, int], None],
        clock: Callable[[], float] = time.monotonic,
        title_width: int = PREVIEW_TITLE_WIDTH,
    ) -> None:
        self._scheduler = scheduler
        self._cache = cache
        self._fs = fs
        self._sink = sink
        self._config = config
        self._notify = notify
        self._clock = clock
        self._title_width = title_width
        self.displayed_path: str | None = None

    def request_preview(self, item: ResultItem) -> bool:
        """Show ``item`` in the preview pane; return ``False`` if already shown."""
        if item.path == self.displayed_path:
            return False

        self.displayed_path = item.path
        title = preview_title(item.display_path, self._title_width)

        cached = self._cache.get(item.path)
        if cached is not None:
            self._cache.cancel_pending()
            self._apply(item, cached, title)
            return True

        self._sink.render_preview(title, loading_preview_lines(item), "text")
        self._cache.pending_path = item.path
        self._scheduler.defer(lambda: self._load(item, title))
        return True

    def _load(self, item: ResultItem, title: str) -> None:
        if self.displayed_path != item.path or self._cache.pending_path != item.path:
            logger.debug("discarding superseded preview load for %s", item.path)
            return

        try:
            entry = build_cache_entry(item.path, self._fs, self._config.preview, self._clock)
        except Exception as exc:
            self._cache.cancel_pending()
            self._sink.render_preview(title, failed_preview_lines(item), "text")
            self._notify(f"Failed to load preview for {item.path}: {exc}", logging.DEBUG)
            return

        self._cache.put(item.path, entry)
        self._cache.cancel_pending()
        self._apply(item, entry, title)

    def _apply(self, item: ResultItem, entry: PreviewCacheEntry, title: str) -> None:
        self._sink.render_preview(title, list(entry.lines), entry.content_kind)
        if self._config.show_scores:
            self._sink.render_file_info(file_info_lines(item, self._fs.stat(item.path)))

    def clear_preview(self) -> None:
        self.displayed_path = None
        self._sink.render_preview(DEFAULT_PREVIEW_TITLE, list(NO_PREVIEW_LINES), "text")
        if self._config.show_scores:
            self._sink.render_file_info(list(PLACEHOLDER_LINES))

    def reset(self) -> None:
        """Forget the displayed target and drop any in-flight request."""
        self.displayed_path = None
        self._cache.cancel_pending()


__all__ = ["AsyncPreviewLoader"]
