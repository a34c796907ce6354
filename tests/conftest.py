"""Shared test fixtures for fmodsync."""

import json
import os
from pathlib import Path

import pytest

from fmodsync.config.models import FmodSyncConfig, ProjectConfig
from fmodsync.export.models import Event

# Keep Rich from wrapping CLI output (e.g. long tmp paths) at the 80-column
# default used when no terminal is attached.
os.environ.setdefault("COLUMNS", "200")


def make_event(**overrides) -> dict:
    event = {
        "name": "Explosion_Far",
        "guid": "{abc-1}",
        "full_path": "event:/SFX/Weapons/Explosion_Far",
        "folder_path": "SFX/Weapons",
        "banks": ["Master", "Weapons"],
        "loop_type": "oneshot",
        "space": "3D",
        "max_voices": 8,
        "notes": "boom",
        "parameters": [
            {"name": "Distance", "type": "built-in", "min": 0, "max": 50.5, "initial": 0},
        ],
        "user_properties": [
            {"name": "Owner", "type": "string", "value": "Sam"},
        ],
        "audio_files": [],
    }
    event.update(overrides)
    return event


def make_export(events: list[dict] | None = None, **overrides) -> dict:
    data = {
        "exported_at": "2024-05-01T13:45:00",
        "fmod_version": "2.02.20",
        "project_name": "MyGame",
        "project_path": "/projects/MyGame/MyGame.fspro",
        "event_count": 1,
        "events": [make_event()] if events is None else events,
    }
    data.update(overrides)
    return data


def write_export(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def sample_event() -> Event:
    return Event.model_validate(make_event())


@pytest.fixture
def vault(tmp_path) -> Path:
    """An empty vault directory."""
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def project_config() -> ProjectConfig:
    return ProjectConfig(id="main", export_path="exports/MyGame.json", output_folder="FMOD")


@pytest.fixture
def sync_config(vault, project_config) -> FmodSyncConfig:
    return FmodSyncConfig(vault_path=str(vault), projects=[project_config])


@pytest.fixture
def export_file(vault) -> Path:
    return write_export(vault / "exports" / "MyGame.json", make_export())
