"""Lookup of existing notes by machine identifier and by filename."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from fmodsync.markdown.filename import MAX_FILENAME_LENGTH, sanitize_filename
from fmodsync.markdown.frontmatter import parse_frontmatter
from fmodsync.markdown.note import NOTE_SUFFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocRef:
    """An existing note: where it is, what it says, and whom it belongs to."""

    path: Path
    text: str
    identifier: str | None = None


def read_document(path: Path, id_key: str) -> DocRef:
    text = path.read_text(encoding="utf-8")
    return DocRef(path=path, text=text, identifier=extract_identifier(text, id_key))


def extract_identifier(text: str, id_key: str) -> str | None:
    value = parse_frontmatter(text).properties.get(id_key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def scan_documents(root: Path, id_key: str, exclude: Iterable[Path] = ()) -> list[DocRef]:
    """Read every note under ``root`` in sorted path order.

    Hidden directories and anything below an ``exclude`` directory are
    skipped. Unreadable files are logged and left out.
    """
    root = Path(root)
    if not root.is_dir():
        return []
    excluded = [Path(p) for p in exclude]

    docs: list[DocRef] = []
    for path in sorted(root.rglob(f"*{NOTE_SUFFIX}")):
        rel_parts = path.relative_to(root).parts
        if any(part.startswith(".") for part in rel_parts[:-1]):
            continue
        if any(path.is_relative_to(ex) for ex in excluded):
            continue
        if not path.is_file():
            continue
        try:
            docs.append(read_document(path, id_key))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable note %s: %s", path, e)
    logger.debug("Scanned %d notes under %s", len(docs), root)
    return docs


@dataclass(frozen=True)
class IdentityIndex:
    by_identifier: dict[str, DocRef] = field(default_factory=dict)
    by_filename: dict[str, DocRef] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        documents: Iterable[DocRef],
        max_filename_length: int = MAX_FILENAME_LENGTH,
    ) -> IdentityIndex:
        """Index notes by identifier and by sanitized filename stem.

        When two notes share a stem, the one scanned last wins.
        """
        by_identifier: dict[str, DocRef] = {}
        by_filename: dict[str, DocRef] = {}
        for doc in documents:
            if doc.identifier:
                if doc.identifier in by_identifier:
                    logger.warning(
                        "Identifier %s appears in both %s and %s; using the latter",
                        doc.identifier, by_identifier[doc.identifier].path, doc.path,
                    )
                by_identifier[doc.identifier] = doc
            by_filename[sanitize_filename(doc.path.stem, max_filename_length)] = doc
        return cls(by_identifier=by_identifier, by_filename=by_filename)
