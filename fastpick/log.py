"""Logging setup for the ``fastpick`` logger tree."""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME, LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / f"{APP_NAME}.log"

_HANDLER_MARKER = "_fastpick_file_handler"


def configure_logging(config: LoggingConfig) -> Path | None:
    """Attach one file handler to the ``fastpick`` logger when enabled.

    Calling this again replaces the previously installed handler. Returns the
    log file path, or ``None`` when logging is disabled or the file cannot be
    opened.
    """
    root = logging.getLogger(APP_NAME)
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()

    if not config.enabled:
        return None

    log_path = Path(config.log_file).expanduser() if config.log_file else DEFAULT_LOG_PATH
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as exc:
        root.warning("could not open log file %s: %s", log_path, exc)
        return None

    setattr(handler, _HANDLER_MARKER, True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.level.upper()))
    return log_path


__all__ = ["DEFAULT_LOG_PATH", "configure_logging"]
