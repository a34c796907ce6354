"""YAML config loading with env var expansion."""

import logging
import os
import re
from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import FmodSyncConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "fmodsync.yaml"
USER_CONFIG_PATH = Path(".fmodsync") / "config.yaml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")


def load_config(cli_path: str | None = None) -> FmodSyncConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults.

    An explicit ``cli_path`` must exist. Empty files are skipped as if absent.
    """
    if cli_path and not Path(cli_path).expanduser().is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in _candidate_paths(cli_path):
        raw = _read_yaml(path)
        if raw is None:
            continue
        try:
            cfg = FmodSyncConfig.model_validate(_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
        logger.debug("Loaded config from %s", path)
        return cfg

    return FmodSyncConfig()


def _candidate_paths(cli_path: str | None) -> Iterator[Path]:
    if cli_path:
        yield Path(cli_path).expanduser()
    yield Path(CONFIG_FILENAME)
    yield Path.home() / USER_CONFIG_PATH


def _read_yaml(path: Path) -> dict | None:
    if not path.is_file():
        return None
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: top level must be a mapping")
    return raw


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings; unset variables become empty."""
    if isinstance(obj, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


# Default YAML template for `fmodsync config init`
DEFAULT_CONFIG_TEMPLATE = """\
# fmodsync.yaml

# Root of the Obsidian vault; output folders are relative to it
vault_path: "."

# One entry per FMOD Studio project export
projects:
  - id: "main"
    export_path: "exports/MyGame.json"   # absolute, or relative to vault_path
    output_folder: "FMOD/MyGame"
    events_folder: "Events"
    audio_folder: "Audio Files"
    audio_notes: true

# Display-only metadata cached from the last successful sync
state_file: ".fmodsync/state.json"

# Longest note filename (without .md) before truncation
max_filename_length: 100

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
