"""Exception hierarchy for fmodsync."""

from __future__ import annotations


class FmodSyncError(Exception):
    """Base class for every error fmodsync raises on purpose."""


class ExportReadError(FmodSyncError):
    """The export file is missing, unreadable, or not JSON."""

    def __init__(self, path: str, cause: Exception) -> None:
        self.path = path
        super().__init__(f"Failed to read export {path}: {cause}")
        self.__cause__ = cause


class ExportValidationError(FmodSyncError):
    """The export parsed but does not have the expected structure."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        preview = "; ".join(self.errors[:3])
        more = f" (+{len(self.errors) - 3} more)" if len(self.errors) > 3 else ""
        super().__init__(f"Invalid export structure: {preview}{more}")


class SyncInProgressError(FmodSyncError):
    """A sync run was triggered while another one is still active."""


class TargetOccupiedError(FmodSyncError):
    """A known note cannot be written because another note sits at its target path."""

    def __init__(self, target: str, occupant_id: str | None) -> None:
        self.target = target
        self.occupant_id = occupant_id
        owner = f"identifier {occupant_id}" if occupant_id else "no identifier"
        super().__init__(f"Target path {target} is occupied by another note ({owner})")


class PathTraversalError(FmodSyncError):
    """A computed note path escapes the configured output root."""
