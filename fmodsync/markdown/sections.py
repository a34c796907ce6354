"""Split a note body into ``## `` sections and merge regenerated ones back in."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

HEADING_PREFIX = "## "
_FENCES = ("```", "~~~")


@dataclass(frozen=True)
class Section:
    """A slice of the body. ``heading`` is None for text before the first heading."""

    heading: str | None
    text: str


def split_sections(body: str) -> list[Section]:
    """Split on second-level headings, keeping each section's exact text.

    Headings inside fenced code blocks do not start a section.
    """
    sections: list[Section] = []
    heading: str | None = None
    chunk: list[str] = []
    fence: str | None = None

    for line in body.splitlines(keepends=True):
        marker = line.lstrip()[:3]
        if fence is None and marker in _FENCES:
            fence = marker
        elif fence is not None and marker == fence:
            fence = None
        elif fence is None and line.startswith(HEADING_PREFIX):
            if heading is not None or chunk:
                sections.append(Section(heading, "".join(chunk)))
            heading = line[len(HEADING_PREFIX):].strip()
            chunk = [line]
            continue
        chunk.append(line)

    if heading is not None or chunk:
        sections.append(Section(heading, "".join(chunk)))
    return sections


def nest_headings(content: str) -> str:
    """Keep generated text from opening sections of its own.

    ``## `` lines outside code fences drop one level and a fence left open
    at the end is closed.
    """
    lines: list[str] = []
    fence: str | None = None
    for line in content.splitlines(keepends=True):
        marker = line.lstrip()[:3]
        if fence is None and marker in _FENCES:
            fence = marker
        elif fence is not None and marker == fence:
            fence = None
        elif fence is None and line.startswith(HEADING_PREFIX):
            line = "#" + line
        lines.append(line)
    text = "".join(lines)
    if fence is not None:
        text = text.rstrip("\n") + "\n" + fence
    return text


def render_section(heading: str, content: str) -> str:
    text = f"{HEADING_PREFIX}{heading}\n"
    if content.strip():
        text += nest_headings(content).rstrip("\n") + "\n"
    return text + "\n"


def merge_body(
    existing_body: str | None,
    managed_sections: Sequence[tuple[str, str]],
    managed_names: Iterable[str],
) -> str:
    """Rebuild a body from freshly rendered managed sections.

    ``managed_names`` lists the managed headings in canonical order; matching
    is case-insensitive. Every existing section whose heading is not managed
    is carried over verbatim after the managed ones, in its original order.
    Text before the first heading stays at the top.
    """
    order = [name.lower() for name in managed_names]
    managed = {name for name in order}

    preamble = ""
    user_sections: list[str] = []
    for section in split_sections(existing_body or ""):
        if section.heading is None:
            preamble = section.text.lstrip("\r\n")
        elif section.heading.lower() not in managed:
            user_sections.append(section.text)

    regenerated = sorted(
        (s for s in managed_sections if s[0].lower() in managed),
        key=lambda s: order.index(s[0].lower()),
    )

    chunks: list[str] = []
    if preamble.strip():
        if not preamble.endswith("\n\n"):
            preamble = preamble.rstrip("\r\n") + "\n\n"
        chunks.append(preamble)
    chunks.extend(render_section(heading, content) for heading, content in regenerated)
    chunks.extend(user_sections)

    for i in range(len(chunks) - 1):
        if not chunks[i].endswith("\n"):
            chunks[i] += "\n"
    return "".join(chunks)
