"""Coalesce bursts of query and cursor changes into one scheduled update."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.010
MAX_QUERY_LENGTH = 1000


@dataclass(frozen=True)
class DebounceCallbacks:
    """Work performed, in this order, when the debounce timer fires."""

    refresh_results: Callable[[], None]
    render_list: Callable[[], None]
    update_preview: Callable[[], None]
    update_status: Callable[[], None]


class QueryDebounceController:
    """Own the single debounce timer of a session.

    Arming a timer bumps ``generation``; a firing timer whose generation is no
    longer current does nothing, so only the newest arm ever takes effect even
    if a cancelled handle slips through.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        callbacks: DebounceCallbacks,
        interval_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        max_query_length: int = MAX_QUERY_LENGTH,
        is_active: Callable[[], bool] = lambda: True,
        notify: Callable[[str, int], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._callbacks = callbacks
        self.interval_seconds = interval_seconds
        self.max_query_length = max_query_length
        self._is_active = is_active
        self._notify = notify
        self._timer: TimerHandle | None = None
        self.generation = 0
        self.results_stale = False
        self.initial_render_complete = False

    @property
    def pending(self) -> bool:
        return self._timer is not None and self._timer.active

    def on_query_changed(self, new_query: str) -> bool:
        """Validate a query edit; ``True`` means the caller should store it.

        Empty queries arriving before the first render are spurious signals
        from prompt setup. Queries over the length ceiling are rejected.
        """
        if not self.initial_render_complete and new_query == "":
            return False
        if len(new_query) > self.max_query_length:
            message = f"Query too long ({len(new_query)} > {self.max_query_length} characters); ignored"
            if self._notify is not None:
                self._notify(message, logging.WARNING)
            else:
                logger.warning(message)
            return False
        return True

    def request_refresh(self) -> None:
        """Mark the result list stale and schedule an update."""
        self.results_stale = True
        self.schedule_update()

    def schedule_update(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self.generation += 1
        generation = self.generation
        self._timer = self._scheduler.call_later(self.interval_seconds, lambda: self._fire(generation))

    def _fire(self, generation: int) -> None:
        if generation != self.generation:
            return
        self._timer = None
        if not self._is_active():
            return

        if self.results_stale:
            self.results_stale = False
            self._callbacks.refresh_results()
        self._callbacks.render_list()
        self._callbacks.update_preview()
        self._callbacks.update_status()

        if not self.initial_render_complete:
            self.initial_render_complete = True

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.generation += 1
        self.results_stale = False

    def reset(self) -> None:
        self.cancel()
        self.initial_render_complete = False


__all__ = ["DebounceCallbacks", "QueryDebounceController"]
