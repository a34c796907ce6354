"""Tests for event and audio note rendering."""

from pathlib import PurePosixPath

from conftest import make_event
from fmodsync.export.models import AudioFile, Event
from fmodsync.markdown.audio import AudioFileNote, collect_audio_notes, file_uri
from fmodsync.markdown.frontmatter import parse_frontmatter
from fmodsync.markdown.generator import EVENT_MACHINE_KEYS, EventNote, format_value, wiki_link
from fmodsync.markdown.note import merge_properties

EXPORTED_AT = "2024-05-01T13:45:00"


def _event(**overrides) -> Event:
    return Event.model_validate(make_event(**overrides))


def _audio(path: str, asset_path: str) -> AudioFile:
    return AudioFile(path=path, asset_path=asset_path)


def _note(event: Event, max_len: int = 100) -> EventNote:
    return EventNote(event, "MyGame", EXPORTED_AT, max_len)


def _body(text: str) -> str:
    return text[parse_frontmatter(text).body_start:]


class TestFormatValue:
    def test_numbers(self):
        assert format_value(0.0) == "0"
        assert format_value(50.5) == "50.5"
        assert format_value(8) == "8"

    def test_bool(self):
        assert format_value(True) == "true"

    def test_wiki_link(self):
        assert wiki_link("Boom") == "[[Boom]]"
        assert wiki_link("Boom_Far", "Boom Far") == "[[Boom_Far|Boom Far]]"


class TestEventNote:
    def test_identity_and_path(self, sample_event):
        note = _note(sample_event)
        assert note.identifier == "{abc-1}"
        assert note.relative_path() == PurePosixPath("SFX/Weapons/Explosion_Far.md")

    def test_path_sanitized(self):
        note = _note(_event(name="Boom: Far?", folder_path="SFX/Big Guns"))
        assert note.relative_path() == PurePosixPath("SFX/Big_Guns/Boom-_Far.md")

    def test_root_level_event(self):
        note = _note(_event(folder_path="", full_path=""))
        assert note.relative_path() == PurePosixPath("Explosion_Far.md")

    def test_header(self, sample_event):
        props = parse_frontmatter(_note(sample_event).render()).properties
        assert list(props) == [
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
        ]
        assert props["fmod_status"] == "exists"
        assert props["fmod_guid"] == "{abc-1}"
        assert props["fmod_banks"] == ["Master", "Weapons"]
        assert props["fmod_full_path"] == "event:/SFX/Weapons/Explosion_Far"
        assert props["fmod_max_voices"] == "8"
        assert props["fmod_parameters"] == ["Distance"]
        assert props["fmod_last_synced"] == EXPORTED_AT

    def test_empty_values_omitted(self):
        props = parse_frontmatter(_note(_event(banks=[], parameters=[], space="")).render()).properties
        assert "fmod_banks" not in props
        assert "fmod_parameters" not in props
        assert "fmod_space" not in props

    def test_body(self, sample_event):
        body = _body(_note(sample_event).render())
        assert body == (
            "\n"
            "## Parameters\n"
            "| Name | Type | Min | Max | Initial |\n"
            "|------|------|-----|-----|---------|\n"
            "| Distance | built-in | 0 | 50.5 | 0 |\n"
            "\n"
            "## Notes\n"
            "boom\n"
            "\n"
            "## User Properties\n"
            "- Owner (string) = Sam\n"
            "\n"
        )

    def test_notes_section_always_present(self):
        body = _body(_note(_event(notes="", parameters=[], user_properties=[])).render())
        assert body == "\n## Notes\n\n"

    def test_table_cells_escaped(self):
        event = _event(parameters=[{"name": "A|B", "type": "user", "min": 0, "max": 1, "initial": 0.5}])
        assert "| A\\|B | user | 0 | 1 | 0.5 |" in _note(event).render()

    def test_audio_links_deduplicated(self):
        audio = {"path": "C:/Sounds/boom.wav", "asset_path": "Weapons/boom.wav"}
        event = _event(audio_files=[audio, audio, {"path": "", "asset_path": ""}])
        body = _body(_note(event).render())
        assert body.endswith("## Audio Files\n- [[boom.wav.md|boom.wav]]\n\n")

    def test_user_keys_and_sections_preserved(self, sample_event):
        existing = (
            "---\n"
            "fmod_guid: \"{abc-1}\"\n"
            "fmod_space: 2D\n"
            "tags:\n"
            "  - sfx\n"
            "aliases: [boom]\n"
            "---\n"
            "\n"
            "## Notes\n"
            "old notes\n"
            "\n"
            "## My Ideas\n"
            "make it louder\n"
        )
        text = _note(sample_event).render(existing)
        props = parse_frontmatter(text).properties
        assert props["fmod_space"] == "3D"
        assert props["tags"] == ["sfx"]
        assert props["aliases"] == ["boom"]
        assert list(props)[-2:] == ["aliases", "tags"]
        assert "old notes" not in text
        assert text.endswith("## Notes\nboom\n\n## User Properties\n- Owner (string) = Sam\n\n## My Ideas\nmake it louder\n")

    def test_stale_machine_key_dropped(self):
        existing = "---\nfmod_guid: \"{abc-1}\"\nfmod_loop_type: loop\n---\n"
        text = _note(_event(loop_type="")).render(existing)
        assert "fmod_loop_type" not in parse_frontmatter(text).properties

    def test_user_flow_list_with_commas_survives(self, sample_event):
        existing = '---\nfmod_guid: "{abc-1}"\ntags: ["a, b", c]\n---\n'
        text = _note(sample_event).render(existing)
        assert parse_frontmatter(text).properties["tags"] == ["a, b", "c"]

    def test_user_nested_mapping_survives(self, sample_event):
        existing = '---\nfmod_guid: "{abc-1}"\nmeta:\n  author: me\n  reviewed: yes\n---\n'
        note = _note(sample_event)
        out = note.render(existing)
        assert "author: me" in out
        assert parse_frontmatter(out).properties["meta"] == {"author": "me", "reviewed": "yes"}
        assert note.render(out) == out

    def test_render_idempotent(self, sample_event):
        note = _note(sample_event)
        once = note.render("intro\n\n## Mine\nkeep\n")
        assert note.render(once) == once


class TestMergeProperties:
    def test_machine_first_then_sorted_user_keys(self):
        merged = merge_properties(
            {"zeta": "z", "fmod_guid": "old", "alpha": ["a"]},
            {"fmod_guid": "new", "fmod_status": "exists", "fmod_space": None},
            EVENT_MACHINE_KEYS,
        )
        assert list(merged.items()) == [
            ("fmod_status", "exists"),
            ("fmod_guid", "new"),
            ("alpha", ["a"]),
            ("zeta", "z"),
        ]


class TestAudioNotes:
    def test_collect_merges_events_by_path(self):
        boom = {"path": "C:/Sounds/boom.wav", "asset_path": "Weapons/boom.wav"}
        hiss = {"path": "C:/Sounds/hiss.wav", "asset_path": ""}
        events = [
            _event(audio_files=[boom]),
            _event(guid="{abc-2}", name="Explosion_Near", audio_files=[boom, hiss]),
            _event(guid="{abc-3}", name="Silent", audio_files=[{"path": "", "asset_path": ""}]),
        ]
        notes = collect_audio_notes(events, "MyGame", EXPORTED_AT)
        assert [n.identifier for n in notes] == ["C:/Sounds/boom.wav", "C:/Sounds/hiss.wav"]
        assert notes[0].event_names == ["Explosion_Far", "Explosion_Near"]
        assert notes[1].event_names == ["Explosion_Near"]

    def test_audio_note_path_mirrors_assets(self):
        note = AudioFileNote(_audio("C:/Sounds/boom.wav", "Weapons/Big/boom.wav"), "MyGame", EXPORTED_AT)
        assert note.relative_path() == PurePosixPath("Weapons/Big/boom.wav.md")

    def test_audio_note_render(self):
        note = AudioFileNote(_audio("C:/Sounds/Big Boom.wav", "Weapons/Big Boom.wav"), "MyGame", EXPORTED_AT)
        note.add_event("Explosion Far")
        note.add_event("Explosion Far")
        text = note.render()
        props = parse_frontmatter(text).properties
        assert props["fmod_audio_path"] == "C:/Sounds/Big Boom.wav"
        assert props["fmod_asset_path"] == "Weapons/Big Boom.wav"
        assert props["fmod_events"] == ["Explosion Far"]
        assert "## File\n[Big Boom.wav](<file:///C:/Sounds/Big%20Boom.wav>)\n" in text
        assert "## Used By\n- [[Explosion_Far|Explosion Far]]\n" in text

    def test_file_uri(self):
        assert file_uri("/home/me/boom.wav") == "file:///home/me/boom.wav"
        assert file_uri("C:\\Sounds\\a b.wav") == "file:///C:/Sounds/a%20b.wav"
