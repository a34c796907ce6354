"""Tests for the per-run driver and the vault writer."""

import pytest

from conftest import make_event
from fmodsync.errors import PathTraversalError, TargetOccupiedError
from fmodsync.export.models import Event
from fmodsync.markdown.generator import EventNote
from fmodsync.sync.driver import SyncDriver
from fmodsync.sync.index import scan_documents
from fmodsync.sync.reconciler import Action, ReconcileResult, Reconciler
from fmodsync.sync.writer import VaultWriter


def _source(**overrides) -> EventNote:
    return EventNote(Event.model_validate(make_event(**overrides)), "MyGame", "2024-05-01T13:45:00")


class _Broken(EventNote):
    def sections(self):
        raise RuntimeError("render exploded")


def _run(root, sources, *, dry_run=False, progress=None):
    events_root = root / "Events"
    driver = SyncDriver(Reconciler(events_root), VaultWriter(root), dry_run=dry_run, progress=progress)
    return driver.run(sources, scan_documents(root, "fmod_guid"))


class TestSyncDriver:
    def test_creates_notes(self, tmp_path):
        report = _run(tmp_path, [_source(), _source(guid="{abc-2}", name="Explosion_Near")])
        assert report.stats.created == 2
        assert (tmp_path / "Events" / "SFX" / "Weapons" / "Explosion_Far.md").is_file()
        assert (tmp_path / "Events" / "SFX" / "Weapons" / "Explosion_Near.md").is_file()
        assert [a.action for a in report.actions] == ["create", "create"]

    def test_second_run_is_a_no_op(self, tmp_path):
        _run(tmp_path, [_source()])
        path = tmp_path / "Events" / "SFX" / "Weapons" / "Explosion_Far.md"
        before = path.read_bytes()

        report = _run(tmp_path, [_source()])
        assert report.stats.unchanged == 1
        assert report.stats.updated == 0
        assert report.actions == []
        assert path.read_bytes() == before

    def test_changed_record_is_updated(self, tmp_path):
        _run(tmp_path, [_source()])
        report = _run(tmp_path, [_source(notes="louder")])
        assert report.stats.updated == 1
        path = tmp_path / "Events" / "SFX" / "Weapons" / "Explosion_Far.md"
        assert "## Notes\nlouder\n" in path.read_text(encoding="utf-8")

    def test_move_removes_old_note(self, tmp_path):
        _run(tmp_path, [_source()])
        report = _run(tmp_path, [_source(folder_path="SFX/Explosions")])
        assert report.stats.moved == 1
        assert not (tmp_path / "Events" / "SFX" / "Weapons" / "Explosion_Far.md").exists()
        assert (tmp_path / "Events" / "SFX" / "Explosions" / "Explosion_Far.md").is_file()

    def test_collision_within_one_run(self, tmp_path):
        report = _run(tmp_path, [_source(), _source(guid="{abc-2}")])
        assert report.stats.created == 1
        assert report.stats.skipped == 1
        assert report.skipped[0].identifier == "{abc-2}"
        assert "{abc-1}" in report.skipped[0].reason

    def test_failing_record_does_not_stop_run(self, tmp_path):
        broken = _Broken(Event.model_validate(make_event(guid="{bad}", name="Broken")), "MyGame", "x")
        report = _run(tmp_path, [broken, _source()])
        assert report.stats.errors == 1
        assert report.stats.created == 1
        assert report.errors[0].name == "Broken"
        assert "render exploded" in report.errors[0].error

    def test_dry_run_writes_nothing(self, tmp_path):
        report = _run(tmp_path, [_source()], dry_run=True)
        assert report.stats.created == 1
        assert report.actions[0].target.endswith("Explosion_Far.md")
        assert not (tmp_path / "Events").exists()

    def test_dry_run_tracks_batch_collisions(self, tmp_path):
        report = _run(tmp_path, [_source(), _source(guid="{abc-2}")], dry_run=True)
        assert report.stats.created == 1
        assert report.stats.skipped == 1

    def test_progress_reported_per_record(self, tmp_path):
        seen = []
        _run(tmp_path, [_source(), _source(guid="{abc-2}", name="Other")], progress=seen.append)
        assert [(p.phase, p.current, p.total) for p in seen] == [("processing", 1, 2), ("processing", 2, 2)]
        assert seen[1].name == "Other"


class TestVaultWriter:
    def test_refuses_paths_outside_root(self, tmp_path):
        writer = VaultWriter(tmp_path / "vault")
        result = ReconcileResult(
            action=Action.create,
            name="Escape",
            identifier="{x}",
            target_path=tmp_path / "vault" / ".." / "escape.md",
            text="x",
        )
        with pytest.raises(PathTraversalError):
            writer.apply(result)
        assert not (tmp_path / "escape.md").exists()

    def test_skip_is_not_applied(self, tmp_path):
        result = ReconcileResult(action=Action.skip, name="a", identifier="b", target_path=tmp_path / "a.md")
        assert VaultWriter(tmp_path).apply(result) is False

    def test_missing_text_rejected(self, tmp_path):
        result = ReconcileResult(action=Action.create, name="a", identifier="b", target_path=tmp_path / "a.md")
        with pytest.raises(ValueError):
            VaultWriter(tmp_path).apply(result)

    def test_create_refuses_existing_file(self, tmp_path):
        dest = tmp_path / "a.md"
        dest.write_bytes(b"caf\xe9")
        result = ReconcileResult(action=Action.create, name="a", identifier="b", target_path=dest, text="new")
        with pytest.raises(TargetOccupiedError):
            VaultWriter(tmp_path).apply(result)
        with pytest.raises(TargetOccupiedError):
            VaultWriter(tmp_path).apply(result, dry_run=True)
        assert dest.read_bytes() == b"caf\xe9"

    def test_move_writes_then_unlinks(self, tmp_path):
        old = tmp_path / "old" / "a.md"
        old.parent.mkdir()
        old.write_text("old", encoding="utf-8")
        result = ReconcileResult(
            action=Action.move,
            name="a",
            identifier="b",
            target_path=tmp_path / "new" / "a.md",
            text="new",
            source_path=old,
            previous_text="old",
        )
        assert VaultWriter(tmp_path).apply(result) is True
        assert not old.exists()
        assert (tmp_path / "new" / "a.md").read_text(encoding="utf-8") == "new"
