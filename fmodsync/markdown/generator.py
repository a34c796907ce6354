"""Render FMOD events as vault notes."""

from __future__ import annotations

from fmodsync.export.models import Event
from fmodsync.markdown.filename import MAX_FILENAME_LENGTH, sanitize_filename
from fmodsync.markdown.note import NOTE_SUFFIX, NoteSource

EVENT_ID_KEY = "fmod_guid"

EVENT_MACHINE_KEYS = (
    "fmod_status",
    "fmod_guid",
    "fmod_project",
    "fmod_banks",
    "fmod_folder_path",
    "fmod_full_path",
    "fmod_loop_type",
    "fmod_space",
    "fmod_max_voices",
    "fmod_parameters",
    "fmod_last_synced",
)

EVENT_SECTIONS = ("Parameters", "Notes", "User Properties", "Audio Files")


def format_value(value: object) -> str:
    """Render a number, flag or string the way FMOD Studio displays it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _cell(value: object) -> str:
    return format_value(value).replace("|", "\\|").replace("\n", " ")


def wiki_link(target: str, label: str | None = None) -> str:
    if label and label != target:
        return f"[[{target}|{label}]]"
    return f"[[{target}]]"


class EventNote(NoteSource):
    id_key = EVENT_ID_KEY
    machine_keys = EVENT_MACHINE_KEYS
    managed_sections = EVENT_SECTIONS

    def __init__(
        self,
        event: Event,
        project_name: str,
        exported_at: str,
        max_filename_length: int = MAX_FILENAME_LENGTH,
    ) -> None:
        super().__init__(max_filename_length)
        self.event = event
        self.project_name = project_name
        self.exported_at = exported_at

    @property
    def identifier(self) -> str:
        return self.event.guid

    @property
    def display_name(self) -> str:
        return self.event.name

    @property
    def folder(self) -> str:
        return self.event.location

    def properties(self) -> dict[str, object]:
        event = self.event
        return {
            "fmod_status": "exists",
            "fmod_guid": event.guid,
            "fmod_project": self.project_name,
            "fmod_banks": list(event.banks),
            "fmod_folder_path": event.folder_path,
            "fmod_full_path": event.full_path,
            "fmod_loop_type": event.loop_type,
            "fmod_space": event.space,
            "fmod_max_voices": format_value(event.max_voices),
            "fmod_parameters": [p.name for p in event.parameters],
            "fmod_last_synced": self.exported_at,
        }

    def sections(self) -> list[tuple[str, str]]:
        event = self.event
        sections: list[tuple[str, str]] = []

        if event.parameters:
            rows = [
                "| Name | Type | Min | Max | Initial |",
                "|------|------|-----|-----|---------|",
            ]
            for p in event.parameters:
                rows.append(
                    f"| {_cell(p.name)} | {_cell(p.type)} | {_cell(p.min)} "
                    f"| {_cell(p.max)} | {_cell(p.initial)} |"
                )
            sections.append(("Parameters", "\n".join(rows)))

        sections.append(("Notes", event.notes))

        if event.user_properties:
            lines = []
            for prop in event.user_properties:
                line = f"- {prop.name}"
                if prop.type:
                    line += f" ({prop.type})"
                if prop.value != "":
                    line += f" = {format_value(prop.value)}"
                lines.append(line)
            sections.append(("User Properties", "\n".join(lines)))

        links: list[str] = []
        seen: set[str] = set()
        for audio in event.audio_files:
            key = audio.path or audio.asset_path
            if not key or key in seen:
                continue
            seen.add(key)
            # Stems keep the audio extension; spell out .md or the link resolves to the audio file.
            stem = sanitize_filename(audio.filename, self.max_filename_length)
            links.append(f"- {wiki_link(stem + NOTE_SUFFIX, audio.filename)}")
        if links:
            sections.append(("Audio Files", "\n".join(links)))

        return sections
