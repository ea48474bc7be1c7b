"""Public package surface for fastpick.

The interactive core is ``PickerSession``; collaborator contracts live in
``fastpick.backend`` and configuration in ``fastpick.config``.
"""

from __future__ import annotations

from .backend import ResultItem, ScanProgress, Score, SearchResponse
from .config import PickerConfig, PreviewConfig
from .scheduler import Scheduler
from .session import PickerSession, SessionPhase

__all__ = [
    "PickerConfig",
    "PickerSession",
    "PreviewConfig",
    "ResultItem",
    "ScanProgress",
    "Scheduler",
    "Score",
    "SearchResponse",
    "SessionPhase",
]
