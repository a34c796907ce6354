"""Audio asset notes linking each referenced file back to its events."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import quote

from fmodsync.export.models import AudioFile, Event
from fmodsync.markdown.filename import MAX_FILENAME_LENGTH, sanitize_filename
from fmodsync.markdown.generator import wiki_link
from fmodsync.markdown.note import NoteSource

AUDIO_ID_KEY = "fmod_audio_path"

AUDIO_MACHINE_KEYS = (
    "fmod_status",
    "fmod_audio_path",
    "fmod_asset_path",
    "fmod_project",
    "fmod_events",
    "fmod_last_synced",
)

AUDIO_SECTIONS = ("File", "Used By")


def file_uri(path: str) -> str:
    normalized = path.replace("\\", "/").lstrip("/")
    return "file:///" + quote(normalized, safe="/:")


class AudioFileNote(NoteSource):
    id_key = AUDIO_ID_KEY
    machine_keys = AUDIO_MACHINE_KEYS
    managed_sections = AUDIO_SECTIONS

    def __init__(
        self,
        audio: AudioFile,
        project_name: str,
        exported_at: str,
        max_filename_length: int = MAX_FILENAME_LENGTH,
    ) -> None:
        super().__init__(max_filename_length)
        self.audio = audio
        self.project_name = project_name
        self.exported_at = exported_at
        self.event_names: list[str] = []

    @property
    def identifier(self) -> str:
        return self.audio.path or self.audio.asset_path

    @property
    def display_name(self) -> str:
        return self.audio.filename

    @property
    def folder(self) -> str:
        return self.audio.asset_folder

    def add_event(self, name: str) -> None:
        if name not in self.event_names:
            self.event_names.append(name)

    def properties(self) -> dict[str, object]:
        return {
            "fmod_status": "exists",
            "fmod_audio_path": self.identifier,
            "fmod_asset_path": self.audio.asset_path,
            "fmod_project": self.project_name,
            "fmod_events": list(self.event_names),
            "fmod_last_synced": self.exported_at,
        }

    def sections(self) -> list[tuple[str, str]]:
        sections = []
        if self.audio.path:
            sections.append(("File", f"[{self.audio.filename}](<{file_uri(self.audio.path)}>)"))
        if self.event_names:
            links = [
                f"- {wiki_link(sanitize_filename(name, self.max_filename_length), name)}"
                for name in self.event_names
            ]
            sections.append(("Used By", "\n".join(links)))
        return sections


def collect_audio_notes(
    events: Iterable[Event],
    project_name: str,
    exported_at: str,
    max_filename_length: int = MAX_FILENAME_LENGTH,
) -> list[AudioFileNote]:
    """One note per distinct audio file, keyed by its absolute path, in first-seen order."""
    notes: dict[str, AudioFileNote] = {}
    for event in events:
        for audio in event.audio_files:
            key = audio.path or audio.asset_path
            if not key:
                continue
            note = notes.get(key)
            if note is None:
                note = AudioFileNote(audio, project_name, exported_at, max_filename_length)
                notes[key] = note
            note.add_event(event.name)
    return list(notes.values())
