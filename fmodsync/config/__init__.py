from .loader import load_config
from .models import FmodSyncConfig, ProjectConfig
from .state import ProjectState, SyncState, load_state, save_state

__all__ = [
    "FmodSyncConfig",
    "ProjectConfig",
    "ProjectState",
    "SyncState",
    "load_config",
    "load_state",
    "save_state",
]
