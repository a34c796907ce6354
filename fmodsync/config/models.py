from pydantic import BaseModel, Field, field_validator
from typing import Literal


class ProjectConfig(BaseModel):
    id: str = Field(min_length=1)
    export_path: str
    output_folder: str
    events_folder: str = "Events"
    audio_folder: str = "Audio Files"
    audio_notes: bool = True

    @field_validator("export_path", "output_folder")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("path cannot be empty or whitespace")
        return v


class FmodSyncConfig(BaseModel):
    vault_path: str = "."
    projects: list[ProjectConfig] = Field(default_factory=list)
    state_file: str = ".fmodsync/state.json"
    max_filename_length: int = Field(default=100, ge=8)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"

    def get_project(self, project_id: str) -> ProjectConfig:
        for project in self.projects:
            if project.id == project_id:
                return project
        known = ", ".join(p.id for p in self.projects) or "none"
        raise KeyError(f"Unknown project '{project_id}' (configured: {known})")
