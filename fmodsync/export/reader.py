"""Reading and validating FMOD export JSON files."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import NamedTuple

from pydantic import ValidationError

from fmodsync.errors import ExportReadError, ExportValidationError
from fmodsync.export.models import ExportData

logger = logging.getLogger(__name__)

# ProjectName_YYYY-MM-DD_HHMMSS.json
_EXPORT_FILENAME_RE = re.compile(r"^(.+)_(\d{4}-\d{2}-\d{2})_(\d{6})$")


class ExportFileInfo(NamedTuple):
    path: Path
    project_name: str
    exported: datetime


def read_export(path: str | Path) -> ExportData:
    """Load and validate an export file.

    Raises ExportReadError for I/O and JSON problems and
    ExportValidationError when the structure is wrong.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ExportReadError(str(path), e) from e
    data = validate_export(raw)
    logger.info(
        "Loaded export %s: project %r, %d events, exported %s",
        path, data.project_name, len(data.events), data.exported_at,
    )
    return data


def validate_export(raw: object) -> ExportData:
    """Check the export structure, collecting every problem before failing."""
    if not isinstance(raw, dict):
        raise ExportValidationError(["Not a valid JSON object"])

    errors: list[str] = []
    events = raw.get("events")
    if not isinstance(events, list):
        errors.append("Missing 'events' array")
    else:
        seen: dict[str, int] = {}
        for i, event in enumerate(events):
            if not isinstance(event, dict):
                errors.append(f"Event {i}: not a valid object")
                continue
            guid = event.get("guid")
            if not isinstance(guid, str) or not guid.strip():
                errors.append(f"Event {i}: missing or invalid 'guid'")
            elif guid in seen:
                errors.append(f"Event {i}: duplicate guid {guid!r} (first seen at event {seen[guid]})")
            else:
                seen[guid] = i
            name = event.get("name")
            if not isinstance(name, str) or not name.strip():
                errors.append(f"Event {i}: missing or invalid 'name'")

    if not isinstance(raw.get("project_name"), str):
        errors.append("Missing 'project_name'")
    if not isinstance(raw.get("exported_at"), str):
        errors.append("Missing 'exported_at'")

    if errors:
        raise ExportValidationError(errors)

    try:
        return ExportData.model_validate(raw)
    except ValidationError as e:
        raise ExportValidationError([_describe(err) for err in e.errors()]) from e


def _describe(err: dict) -> str:
    loc = list(err.get("loc", ()))
    if len(loc) >= 2 and loc[0] == "events":
        field = ".".join(str(part) for part in loc[2:]) or "event"
        return f"Event {loc[1]}: invalid '{field}': {err.get('msg')}"
    return f"Invalid '{'.'.join(str(p) for p in loc)}': {err.get('msg')}"


def parse_export_filename(filename: str) -> tuple[str, datetime] | None:
    """Split a timestamped export name into (project_name, export time).

    Returns None when the name does not follow ProjectName_YYYY-MM-DD_HHMMSS.json.
    """
    base = re.sub(r"\.json$", "", filename, flags=re.IGNORECASE)
    match = _EXPORT_FILENAME_RE.match(base)
    if not match:
        return None
    project_name, date_str, time_str = match.groups()
    try:
        stamp = datetime.strptime(f"{date_str} {time_str}", "%Y-%m-%d %H%M%S")
    except ValueError:
        return None
    return project_name, stamp


def find_newer_export(current: str | Path) -> ExportFileInfo | None:
    """Look next to the current export for a later export of the same project."""
    if not current:
        return None
    current = Path(current)
    parsed = parse_export_filename(current.name)
    if parsed is None:
        return None
    project_name, current_date = parsed

    try:
        candidates = sorted(current.parent.glob("*.json"))
    except OSError:
        return None

    newest: ExportFileInfo | None = None
    for candidate in candidates:
        info = parse_export_filename(candidate.name)
        if info is None or info[0] != project_name:
            continue
        if info[1] > current_date and (newest is None or info[1] > newest.exported):
            newest = ExportFileInfo(candidate, info[0], info[1])
    return newest
