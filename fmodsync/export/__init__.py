"""FMOD export file models and reader."""

from fmodsync.export.models import AudioFile, Event, ExportData, Parameter, UserProperty
from fmodsync.export.reader import (
    ExportFileInfo,
    find_newer_export,
    parse_export_filename,
    read_export,
    validate_export,
)

__all__ = [
    "AudioFile",
    "Event",
    "ExportData",
    "ExportFileInfo",
    "Parameter",
    "UserProperty",
    "find_newer_export",
    "parse_export_filename",
    "read_export",
    "validate_export",
]
