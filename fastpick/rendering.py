"""Line formatting for the result list, status text and preview pane."""

from __future__ import annotations

import posixpath

from .backend import ResultItem, ScanProgress

DEFAULT_PREVIEW_TITLE = " Preview "
NO_PREVIEW_LINES = ("No preview available",)
SCANNING_STATUS = "Scanning..."
MIN_ENTRY_WIDTH = 40
ELLIPSIS_SEGMENT = ".."
CURRENT_FILE_SUFFIX = " (current)"


def shrink_path(path: str, max_width: int) -> str:
    """Drop middle directory segments until ``path`` fits ``max_width``.

    The first and last segments are always kept; removed segments are replaced
    by a single ``..`` segment.
    """
    if len(path) <= max_width:
        return path

    segments = [segment for segment in path.split("/") if segment]
    if len(segments) <= 2:
        return path

    first = segments[0]
    last = segments[-1]
    inner = segments[1:-1]
    for keep in range(len(inner) - 1, 0, -1):
        candidate = "/".join([first, *inner[:keep], ELLIPSIS_SEGMENT, last])
        if len(candidate) <= max_width:
            return candidate
    return f"{first}/{ELLIPSIS_SEGMENT}/{last}"


def item_directory(item: ResultItem) -> str:
    if item.directory:
        return item.directory
    if item.relative_path:
        parent = posixpath.dirname(item.relative_path)
        if parent not in ("", "."):
            return parent
    return ""


def item_filename(item: ResultItem) -> str:
    return item.name or posixpath.basename(item.display_path)


def format_file_display(item: ResultItem, max_width: int) -> tuple[str, str]:
    filename = item_filename(item)
    directory = item_directory(item)
    if not directory:
        return filename, ""
    return filename, shrink_path(directory, max_width - (len(filename) + 1))


def format_frecency_info(item: ResultItem, show_scores: bool) -> str:
    """Return the frecency badge shown after an entry in debug mode."""
    total = item.total_frecency_score
    if total <= 0 or not show_scores:
        return ""
    if item.modification_frecency_score >= 6:
        indicator = "🔥"
    elif item.access_frecency_score >= 4:
        indicator = "⭐"
    elif total >= 3:
        indicator = "✨"
    else:
        indicator = "•"
    return f" {indicator}{total}"


def format_score_info(item: ResultItem, show_scores: bool) -> str:
    if not show_scores or item.score is None:
        return ""
    return f" [{item.score.total}|{item.score.match_type}]"


def format_list_line(item: ResultItem, max_path_width: int, show_scores: bool) -> str:
    frecency = format_frecency_info(item, show_scores)
    score = format_score_info(item, show_scores)
    current = CURRENT_FILE_SUFFIX if item.is_current_file else ""
    available = max(max_path_width - len(frecency) - len(score) - len(current), MIN_ENTRY_WIDTH)
    filename, directory = format_file_display(item, available)
    if directory:
        return f"{filename} {directory}{frecency}{score}{current}"
    return f"{filename}{frecency}{score}{current}"


def clamp_top(cursor: int, top: int, height: int, total: int) -> int:
    """Return a 1-based first visible row that keeps ``cursor`` on screen."""
    if total <= 0 or height <= 0:
        return 1
    top = max(1, min(top, max(1, total - height + 1)))
    if cursor < top:
        return cursor
    if cursor >= top + height:
        return cursor - height + 1
    return top


def render_list_lines(
    items: list[ResultItem],
    cursor: int,
    top: int,
    height: int,
    max_path_width: int,
    show_scores: bool = False,
) -> tuple[list[str], int | None]:
    """Format the visible slice of ``items``.

    Returns the lines and the 0-based row of the cursor within them, or
    ``None`` when there is nothing to select.
    """
    if not items:
        return [], None
    visible = items[top - 1 : top - 1 + height]
    lines = [format_list_line(item, max_path_width, show_scores) for item in visible]
    row = cursor - top
    return lines, row if 0 <= row < len(lines) else None


def format_status(progress: ScanProgress, total_matched: int, total_files: int) -> str:
    if progress.is_scanning:
        return SCANNING_STATUS
    return f"{total_matched}/{total_files}"


def preview_title(display_path: str, width: int) -> str:
    """Fit ``display_path`` into a pane title ``width`` columns wide."""
    max_title_width = width - 4
    if len(display_path) <= max_title_width:
        return f" {display_path} "

    filename = posixpath.basename(display_path)
    dirname = posixpath.dirname(display_path)
    available_dir_width = max_title_width - len(filename) - 6
    if available_dir_width > 10:
        truncated_dir = "..." + dirname[-(available_dir_width - 3) :]
        return f" {truncated_dir}/{filename} "

    if len(filename) > max_title_width - 4:
        filename = filename[: max(1, max_title_width - 7)] + "..."
    return f" {filename} "


def loading_preview_lines(item: ResultItem) -> list[str]:
    return ["⏳ Loading preview...", "", f"File: {item.display_path}"]


def failed_preview_lines(item: ResultItem) -> list[str]:
    return [
        "❌ Failed to load preview",
        "",
        f"File: {item.path}",
        "File may be inaccessible or locked.",
    ]


__all__ = [
    "DEFAULT_PREVIEW_TITLE",
    "NO_PREVIEW_LINES",
    "SCANNING_STATUS",
    "clamp_top",
    "failed_preview_lines",
    "format_file_display",
    "format_frecency_info",
    "format_list_line",
    "format_status",
    "loading_preview_lines",
    "preview_title",
    "render_list_lines",
    "shrink_path",
]
