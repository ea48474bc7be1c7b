"""Poll an external index scan until it finishes."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .backend import NOT_SCANNING, ScanProgress
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_POLL_SECONDS = 0.010


def safe_progress(progress: Callable[[], ScanProgress]) -> ScanProgress:
    """Read scan progress, treating any provider failure as "not scanning"."""
    try:
        result = progress()
    except Exception as exc:
        logger.debug("scan progress query failed: %s", exc)
        return NOT_SCANNING
    if result is None:
        return NOT_SCANNING
    return result


class ScanProgressMonitor:
    """Self-rescheduling poll loop.

    While the provider reports a scan in flight each poll triggers a
    status-only render and re-arms itself after ``poll_seconds``. The first
    poll that sees the scan finished triggers a full result refresh and the
    loop ends. There is no backoff and no upper bound on polling time.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        progress: Callable[[], ScanProgress],
        is_active: Callable[[], bool],
        on_scanning: Callable[[], None],
        on_complete: Callable[[], None],
        poll_seconds: float = DEFAULT_POLL_SECONDS,
    ) -> None:
        self._scheduler = scheduler
        self._progress = progress
        self._is_active = is_active
        self._on_scanning = on_scanning
        self._on_complete = on_complete
        self.poll_seconds = poll_seconds
        self._handle: TimerHandle | None = None
        self.polls = 0

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> bool:
        if self.running:
            return False
        self._handle = self._scheduler.defer(self._poll)
        return True

    def _poll(self) -> None:
        self._handle = None
        if not self._is_active():
            return
        self.polls += 1

        if safe_progress(self._progress).is_scanning:
            self._on_scanning()
            self._handle = self._scheduler.call_later(self.poll_seconds, self._poll)
            return

        logger.debug("index scan finished after %d polls", self.polls)
        self._on_complete()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


__all__ = ["ScanProgressMonitor", "safe_progress"]
