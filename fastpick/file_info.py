"""File-info panel content shown beside the preview in debug mode."""

from __future__ import annotations

import time

from .backend import GIT_STATUS_CLEAR, FileStat, ResultItem
from .preview_cache import detect_content_kind

RULE = "─" * 50
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

PLACEHOLDER_LINES = (
    "File Info Panel",
    "",
    "Select a file to view:",
    "• Comprehensive scoring details",
    "• File size and type information",
    "• Git status integration",
    "• Modification & access timings",
    "• Frecency scoring breakdown",
    "",
    "Navigate: ↑↓ or Ctrl+p/n",
)


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / 1024 / 1024:.1f}MB"
    return f"{size / 1024 / 1024 / 1024:.1f}GB"


def format_timestamp_ns(timestamp_ns: int) -> str:
    if timestamp_ns <= 0:
        return "N/A"
    return time.strftime(TIME_FORMAT, time.localtime(timestamp_ns / 1_000_000_000))


def format_git_status(git_status: str | None) -> str:
    if not git_status or git_status == GIT_STATUS_CLEAR:
        return "Clean"
    return git_status


def file_info_lines(item: ResultItem, file_stat: FileStat | None) -> list[str]:
    """Describe ``item`` for the debug info panel.

    Lists the score breakdown, frecency components, git status and timings.
    """
    size = format_size(file_stat.size) if file_stat is not None else "N/A"
    kind = detect_content_kind(item.path)
    modified = format_timestamp_ns(file_stat.mtime_ns) if file_stat is not None else "N/A"

    score = item.score
    lines = [
        f"Size: {size:<8} │ Total Score: {score.total if score else 0}",
        f"Type: {kind:<8} │ Match Type: {score.match_type if score else 'unknown'}",
        (
            f"Git:  {format_git_status(item.git_status):<8} │ "
            f"Frecency Mod: {item.modification_frecency_score}, Acc: {item.access_frecency_score}"
        ),
    ]
    if score is not None:
        lines.append(
            f"Score Breakdown: base={score.base_score}, name_bonus={score.filename_bonus}, "
            f"special_bonus={score.special_filename_bonus}"
        )
        lines.append(
            f"Score Modifiers: frec_boost={score.frecency_boost}, dist_penalty={score.distance_penalty}"
        )
    else:
        lines.append("Score Breakdown: N/A (no score data available)")
    lines.extend(
        [
            "",
            "TIMINGS",
            RULE,
            f"Modified: {modified}",
            f"Last Access: {format_timestamp_ns(file_stat.atime_ns) if file_stat is not None else 'N/A'}",
        ]
    )
    return lines


__all__ = ["PLACEHOLDER_LINES", "file_info_lines", "format_git_status", "format_size", "format_timestamp_ns"]
