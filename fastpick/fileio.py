"""Local file metadata and bounded text reads for previews."""

from __future__ import annotations

import os
import re
import stat as stat_module

from .backend import FileStat

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def decode_line(raw: bytes) -> str:
    try:
        return raw.decode("utf-8").lstrip("\ufeff")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def sanitize_preview_text(text: str) -> str:
    """Escape control bytes so previews cannot ring bells or move cursors."""
    if _CONTROL_RE.search(text) is None:
        return text

    out: list[str] = []
    for ch in text:
        code = ord(ch)
        if ch == "\t":
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


class LocalFileSystem:
    """``FileSystem`` backed by the host operating system."""

    def stat(self, path: str) -> FileStat | None:
        """Return metadata for ``path`` or ``None`` when it cannot be stat'ed."""
        try:
            result = os.stat(path)
        except (OSError, ValueError):
            return None
        return FileStat(
            mtime_ns=int(result.st_mtime_ns),
            size=int(result.st_size),
            atime_ns=int(result.st_atime_ns),
            is_file=stat_module.S_ISREG(result.st_mode),
        )

    def read(self, path: str, max_lines: int) -> list[str]:
        """Read at most ``max_lines`` lines without their line terminators.

        Raises ``OSError`` when the file cannot be opened or read.
        """
        lines: list[str] = []
        if max_lines <= 0:
            return lines
        with open(path, "rb") as handle:
            for raw in handle:
                lines.append(decode_line(raw).rstrip("\r\n"))
                if len(lines) >= max_lines:
                    break
        return lines


__all__ = ["LocalFileSystem", "decode_line", "sanitize_preview_text"]
