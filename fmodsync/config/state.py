"""Display-only metadata cached from the last successful sync of each project."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ProjectState(BaseModel):
    project_name: str | None = None
    project_path: str | None = None
    fmod_version: str | None = None
    exported_at: str | None = None
    last_synced_at: datetime | None = None


class SyncState(BaseModel):
    projects: dict[str, ProjectState] = Field(default_factory=dict)


def load_state(path: str | Path) -> SyncState:
    """Read the state file; a missing or unreadable file yields an empty state."""
    path = Path(path)
    if not path.is_file():
        return SyncState()
    try:
        return SyncState.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable state file %s: %s", path, e)
        return SyncState()


def save_state(path: str | Path, state: SyncState) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
    return path
