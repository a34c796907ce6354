from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class SyncStats(BaseModel):
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    moved: int = 0
    skipped: int = 0
    errors: int = 0

    def add(self, other: SyncStats) -> None:
        for name in type(self).model_fields:
            setattr(self, name, getattr(self, name) + getattr(other, name))


class SkipReason(BaseModel):
    name: str
    identifier: str
    reason: str


class SyncError(BaseModel):
    name: str
    error: str


class PlannedAction(BaseModel):
    action: str
    name: str
    target: str
    source: str | None = None


class SyncReport(BaseModel):
    stats: SyncStats = Field(default_factory=SyncStats)
    skipped: list[SkipReason] = Field(default_factory=list)
    errors: list[SyncError] = Field(default_factory=list)
    actions: list[PlannedAction] = Field(default_factory=list)
    duration: float = 0.0

    def merge(self, other: SyncReport) -> None:
        self.stats.add(other.stats)
        self.skipped.extend(other.skipped)
        self.errors.extend(other.errors)
        self.actions.extend(other.actions)
        self.duration += other.duration


class SyncProgress(BaseModel):
    phase: Literal["scanning", "processing", "complete"]
    current: int = 0
    total: int = 0
    name: str = ""
