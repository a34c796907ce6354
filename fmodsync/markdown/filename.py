"""Map FMOD names onto safe, length-bounded vault path segments."""

from __future__ import annotations

import re

MAX_FILENAME_LENGTH = 100
ELLIPSIS = "..."
UNNAMED = "_unnamed"

_BAD_CHARS_RE = re.compile(r'[<>:/|?*"\\]')


def sanitize_filename(name: str, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """Make ``name`` usable as a single path segment.

    Deterministic and idempotent: sanitizing an already sanitized name
    returns it unchanged.
    """
    result = _BAD_CHARS_RE.sub("-", name)
    result = re.sub(r"\s+", "_", result)
    result = re.sub(r"-+", "-", result)
    result = result.strip("-")

    if len(result) > max_length:
        result = result[: max_length - len(ELLIPSIS)] + ELLIPSIS

    # Don't allow empty or dot-only names
    if not result or result.strip(".") == "":
        result = UNNAMED
    return result


def sanitize_folder(folder: str, max_length: int = MAX_FILENAME_LENGTH) -> list[str]:
    """Sanitize each segment of a slash-separated folder path, dropping empty ones."""
    return [
        sanitize_filename(segment, max_length)
        for segment in folder.replace("\\", "/").split("/")
        if segment.strip()
    ]
