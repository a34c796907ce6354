"""Base class for notes the sync engine owns."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import ClassVar

from fmodsync.markdown.frontmatter import PropertyValue, format_frontmatter, parse_frontmatter
from fmodsync.markdown.sections import merge_body
from fmodsync.markdown.filename import MAX_FILENAME_LENGTH, sanitize_filename, sanitize_folder

NOTE_SUFFIX = ".md"


class NoteSource(ABC):
    """One incoming record rendered as a vault note.

    Subclasses declare the header key holding the record identity, the
    machine-owned header keys and the managed body sections, all in output
    order.
    """

    id_key: ClassVar[str]
    machine_keys: ClassVar[tuple[str, ...]]
    managed_sections: ClassVar[tuple[str, ...]]

    def __init__(self, max_filename_length: int = MAX_FILENAME_LENGTH) -> None:
        self.max_filename_length = max_filename_length

    @property
    @abstractmethod
    def identifier(self) -> str: ...

    @property
    @abstractmethod
    def display_name(self) -> str: ...

    @property
    def folder(self) -> str:
        return ""

    @abstractmethod
    def properties(self) -> dict[str, object]:
        """Machine-owned header values; None, empty strings and empty lists are dropped."""

    @abstractmethod
    def sections(self) -> list[tuple[str, str]]:
        """Managed (heading, content) pairs to regenerate."""

    @property
    def filename_stem(self) -> str:
        return sanitize_filename(self.display_name, self.max_filename_length)

    def relative_path(self) -> PurePosixPath:
        segments = sanitize_folder(self.folder, self.max_filename_length)
        return PurePosixPath(*segments, self.filename_stem + NOTE_SUFFIX)

    def render(self, existing: str | None = None) -> str:
        """Produce the full note text, keeping user-owned header keys and sections."""
        parsed = parse_frontmatter(existing)
        header = merge_properties(parsed.properties, self.properties(), self.machine_keys)
        body = merge_body(
            existing[parsed.body_start:] if existing else None,
            self.sections(),
            self.managed_sections,
        )
        return format_frontmatter(header) + "\n" + body


def merge_properties(
    existing: Mapping[str, PropertyValue],
    machine: Mapping[str, object],
    machine_keys: tuple[str, ...],
) -> dict[str, object]:
    """Machine keys first in canonical order, then user keys sorted by name."""
    merged: dict[str, object] = {}
    for key in machine_keys:
        value = machine.get(key)
        if value is None or value == "" or value == []:
            continue
        merged[key] = value
    for key in sorted(k for k in existing if k not in machine_keys):
        merged[key] = existing[key]
    return merged
