"""Collapse render requests into one deferred render per scheduler tick."""

from __future__ import annotations

from collections.abc import Callable

from .scheduler import Scheduler, TimerHandle


class RenderScheduler:
    def __init__(self, scheduler: Scheduler, render: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._render = render
        self._handle: TimerHandle | None = None
        self.render_scheduled = False

    def request_render(self) -> bool:
        """Queue a render for the next tick; ``False`` if one is already queued.

        State is read when the render runs, not when it is requested.
        """
        if self.render_scheduled:
            return False
        self.render_scheduled = True
        self._handle = self._scheduler.defer(self._run)
        return True

    def _run(self) -> None:
        self._handle = None
        self.render_scheduled = False
        self._render()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.render_scheduled = False


__all__ = ["RenderScheduler"]
