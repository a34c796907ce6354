"""Pydantic models for the FMOD Studio JSON export."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, field_validator

_EVENT_SCHEME = "event:/"


class Parameter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = ""
    min: int | float | str = ""
    max: int | float | str = ""
    initial: int | float | str = ""
    labels: str | None = None


class UserProperty(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = ""
    value: bool | int | float | str = ""


class AudioFile(BaseModel):
    """An audio asset referenced by an event."""

    model_config = ConfigDict(extra="ignore")

    path: str = ""
    asset_path: str = ""

    @property
    def filename(self) -> str:
        for strategy in _AUDIO_FILENAME_STRATEGIES:
            name = strategy(self)
            if name:
                return name
        return ""

    @property
    def asset_folder(self) -> str:
        """Directory part of the asset path, used to mirror the FMOD assets tree."""
        if not self.asset_path:
            return ""
        parent = PurePosixPath(self.asset_path.replace("\\", "/")).parent
        return "" if str(parent) == "." else str(parent)


def _basename(value: str) -> str:
    return value.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


_AUDIO_FILENAME_STRATEGIES: tuple[Callable[[AudioFile], str], ...] = (
    lambda f: _basename(f.asset_path),
    lambda f: _basename(f.path),
)


class Event(BaseModel):
    """One FMOD event; guid is the stable identity across renames and moves."""

    model_config = ConfigDict(extra="ignore")

    guid: str
    name: str
    full_path: str = ""
    folder_path: str = ""
    banks: list[str] = Field(default_factory=list)
    loop_type: str = ""
    space: str = ""
    max_voices: int | str = ""
    notes: str = ""
    parameters: list[Parameter] = Field(default_factory=list)
    user_properties: list[UserProperty] = Field(default_factory=list)
    audio_files: list[AudioFile] = Field(default_factory=list)

    @field_validator("guid", "name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cannot be empty or whitespace")
        return v

    @field_validator(
        "notes", "loop_type", "space", "folder_path", "full_path", "max_voices", mode="before"
    )
    @classmethod
    def none_as_empty(cls, v: object) -> object:
        return "" if v is None else v

    @property
    def location(self) -> str:
        """Slash-separated folder of the event, without leading/trailing slashes."""
        for strategy in _LOCATION_STRATEGIES:
            folder = strategy(self)
            if folder:
                return folder
        return ""


def _from_folder_path(event: Event) -> str:
    return event.folder_path.strip("/")


def _from_full_path(event: Event) -> str:
    path = event.full_path
    if not path.startswith(_EVENT_SCHEME):
        return ""
    parent = PurePosixPath(path[len(_EVENT_SCHEME):]).parent
    return "" if str(parent) == "." else str(parent).strip("/")


_LOCATION_STRATEGIES: tuple[Callable[[Event], str], ...] = (
    _from_folder_path,
    _from_full_path,
)


class ExportData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    exported_at: str
    project_name: str
    events: list[Event]
    fmod_version: str | None = None
    project_path: str | None = None
    event_count: int | None = None
