"""Structured picker configuration and its JSON persistence.

``PickerConfig`` enumerates every recognized option with its default and is
validated once when constructed. Values loaded from disk go through
``PickerConfig.from_mapping`` which warns about and drops invalid fields
instead of failing, so a broken config file never prevents the picker from
opening.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "fastpick"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

LOG_LEVELS = ("debug", "info", "warning", "error")


class ConfigError(ValueError):
    """Raised when a configuration value is out of its allowed range."""


def _require_positive_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")


def _require_nonnegative_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")


@dataclass(frozen=True)
class PreviewConfig:
    enabled: bool = True
    cache_size: int = 50
    max_lines: int = 800
    max_size: int = 2 * 1024 * 1024
    debounce_ms: int = 10

    def __post_init__(self) -> None:
        _require_positive_int("preview.cache_size", self.cache_size)
        _require_positive_int("preview.max_lines", self.max_lines)
        _require_positive_int("preview.max_size", self.max_size)
        _require_nonnegative_int("preview.debounce_ms", self.debounce_ms)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


@dataclass(frozen=True)
class LoggingConfig:
    enabled: bool = False
    log_file: str | None = None
    level: str = "info"

    def __post_init__(self) -> None:
        if self.level not in LOG_LEVELS:
            raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {self.level!r}")


@dataclass(frozen=True)
class PickerConfig:
    base_path: str | None = None
    max_results: int = 100
    max_query_length: int = 1000
    scan_poll_ms: int = 10
    list_height: int = 20
    max_path_width: int = 80
    show_scores: bool = False
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        _require_positive_int("max_results", self.max_results)
        _require_positive_int("max_query_length", self.max_query_length)
        _require_nonnegative_int("scan_poll_ms", self.scan_poll_ms)
        _require_positive_int("list_height", self.list_height)
        _require_positive_int("max_path_width", self.max_path_width)

    @property
    def scan_poll_seconds(self) -> float:
        return self.scan_poll_ms / 1000.0

    def with_show_scores(self, show_scores: bool) -> PickerConfig:
        return replace(self, show_scores=show_scores)

    def to_mapping(self) -> dict[str, object]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> PickerConfig:
        """Build a config from untrusted JSON data.

        Each field is checked on its own: an invalid value is reported with a
        warning and replaced by its default. Unknown keys are ignored.
        """
        preview = _coerce_section(PreviewConfig, data.get("preview"), "preview")
        log_section = _coerce_section(LoggingConfig, data.get("logging"), "logging")
        top_level = {key: value for key, value in data.items() if key not in {"preview", "logging"}}
        return _coerce_section(cls, top_level, "", preview=preview, logging=log_section)


def _coerce_section(section_cls, raw: object, prefix: str, **fixed: object):
    if raw is None:
        return section_cls(**fixed)
    if not isinstance(raw, Mapping):
        logger.warning("ignoring config section %r: expected an object", prefix or "<root>")
        return section_cls(**fixed)

    defaults = section_cls(**fixed)
    accepted: dict[str, object] = dict(fixed)
    for name in section_cls.__dataclass_fields__:
        if name in fixed or name not in raw:
            continue
        value = raw[name]
        default = getattr(defaults, name)
        if value is None and default is None:
            continue
        expected = type(default) if default is not None else str
        if isinstance(default, bool) and not isinstance(value, bool):
            logger.warning("ignoring config %s%s=%r: expected a boolean", _dotted(prefix), name, value)
            continue
        if not isinstance(value, expected) or (isinstance(value, bool) and expected is int):
            logger.warning(
                "ignoring config %s%s=%r: expected %s", _dotted(prefix), name, value, expected.__name__
            )
            continue
        try:
            section_cls(**{**accepted, name: value})
        except ConfigError as exc:
            logger.warning("ignoring config %s%s: %s; using default %r", _dotted(prefix), name, exc, default)
            continue
        accepted[name] = value
    return section_cls(**accepted)


def _dotted(prefix: str) -> str:
    return f"{prefix}." if prefix else ""


def load_config_data() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("could not read config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_picker_config() -> PickerConfig:
    return PickerConfig.from_mapping(load_config_data())


def save_picker_config(config: PickerConfig) -> None:
    """Persist ``config`` as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(config.to_mapping(), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


__all__ = [
    "CONFIG_PATH",
    "ConfigError",
    "LoggingConfig",
    "PickerConfig",
    "PreviewConfig",
    "load_config_data",
    "load_picker_config",
    "save_picker_config",
]
