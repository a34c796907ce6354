"""Frontmatter header codec for vault notes.

The header between the ``---`` markers is loaded with PyYAML. Parsing never
raises; a missing, unterminated or malformed header yields no properties
and a body that starts at offset 0. Writing uses fixed quoting rules for
scalars and lists, and hands nested values to ``yaml.safe_dump``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

MARKER = "---"

# Characters that force a scalar into double quotes.
_SPECIAL_CHARS = frozenset(":#'\"{}[]&*!|>%@`")
# Indicators that YAML rejects at the start of a plain scalar.
_LEADING_INDICATORS = ("- ", "? ", ",")

# Scalars load as str, lists as lists, mappings as dicts.
PropertyValue = str | list[Any] | dict[str, Any]


@dataclass(frozen=True)
class ParsedFrontmatter:
    properties: dict[str, PropertyValue] = field(default_factory=dict)
    body_start: int = 0


def parse_frontmatter(content: str | None) -> ParsedFrontmatter:
    """Parse the header at the top of a note.

    The header must open with a ``---`` line at offset 0 and close with the
    next line consisting solely of ``---``. ``body_start`` points just past
    the closing line.
    """
    if not content:
        return ParsedFrontmatter()

    lines = content.splitlines(keepends=True)
    if _strip_eol(lines[0]).rstrip() != MARKER:
        return ParsedFrontmatter()

    offset = len(lines[0])
    for i in range(1, len(lines)):
        line = lines[i]
        offset += len(line)
        if _strip_eol(line).rstrip() == MARKER:
            properties = _load_header("".join(lines[1:i]))
            if properties is None:
                return ParsedFrontmatter()
            return ParsedFrontmatter(properties=properties, body_start=offset)

    # Unterminated header: the whole document is body.
    return ParsedFrontmatter()


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def _load_header(text: str) -> dict[str, PropertyValue] | None:
    """Load header text; None means the header is malformed.

    BaseLoader keeps every scalar as the string the user wrote, so values
    like ``12:30``, ``yes`` or ``0.50`` are not retyped.
    """
    try:
        data = yaml.load(text, Loader=yaml.BaseLoader)
    except yaml.YAMLError:
        return None
    if data is None:
        return {}
    if not isinstance(data, dict):
        return None
    return {str(key): value for key, value in data.items()}


def yaml_escape(value: object) -> str:
    """Render a scalar, double-quoting it when YAML would misread it."""
    if value is None:
        return '""'
    if isinstance(value, bool):
        return "true" if value else "false"
    s = str(value)
    if (
        s == ""
        or s != s.strip()
        or any(c in _SPECIAL_CHARS for c in s)
        or s.startswith(_LEADING_INDICATORS)
        or "\n" in s
        or "\r" in s
    ):
        escaped = (
            s.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        return f'"{escaped}"'
    return s


def _is_nested(value: object) -> bool:
    if isinstance(value, Mapping):
        return True
    return isinstance(value, (list, tuple)) and any(
        isinstance(item, (Mapping, list, tuple)) for item in value
    )


def format_property(key: str, value: object) -> str:
    """Format one header property, lists as indented ``- item`` lines."""
    if _is_nested(value):
        return yaml.safe_dump(
            {key: value}, default_flow_style=False, sort_keys=False, allow_unicode=True
        )
    if isinstance(value, (list, tuple)):
        out = f"{yaml_escape(key)}:\n"
        for item in value:
            out += f"  - {yaml_escape(item)}\n"
        return out
    return f"{yaml_escape(key)}: {yaml_escape(value)}\n"


def format_frontmatter(properties: Mapping[str, object]) -> str:
    """Format a complete header block, delimiters included."""
    out = f"{MARKER}\n"
    for key, value in properties.items():
        out += format_property(key, value)
    return out + f"{MARKER}\n"
