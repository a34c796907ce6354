"""Markdown note rendering: frontmatter codec, section merging, note generators."""

from fmodsync.markdown.audio import AudioFileNote, collect_audio_notes
from fmodsync.markdown.filename import sanitize_filename, sanitize_folder
from fmodsync.markdown.frontmatter import (
    ParsedFrontmatter,
    format_frontmatter,
    format_property,
    parse_frontmatter,
    yaml_escape,
)
from fmodsync.markdown.generator import EventNote
from fmodsync.markdown.note import NoteSource
from fmodsync.markdown.sections import Section, merge_body, split_sections

__all__ = [
    "AudioFileNote",
    "EventNote",
    "NoteSource",
    "ParsedFrontmatter",
    "Section",
    "collect_audio_notes",
    "format_frontmatter",
    "format_property",
    "merge_body",
    "parse_frontmatter",
    "sanitize_filename",
    "sanitize_folder",
    "split_sections",
    "yaml_escape",
]
