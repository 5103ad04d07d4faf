"""Storage module for shadowlink.

Provides JSON-based profile persistence with atomic writes.

Public Interface:
    - ProfileStore: Store interface consumed by the importers
    - JsonProfileStore: File-backed ProfileStore
    - get_home_dir: Get SHADOWLINK_HOME
    - get_config_dir: Get config directory
    - get_state_dir: Get state directory
    - get_log_dir: Get log directory
    - get_profiles_dir: Get profile store directory
"""

from .paths import get_config_dir
from .paths import get_home_dir
from .paths import get_log_dir
from .paths import get_profiles_dir
from .paths import get_state_dir
from .profile_store import JsonProfileStore
from .profile_store import ProfileStore

__all__ = [
    "JsonProfileStore",
    "ProfileStore",
    "get_home_dir",
    "get_config_dir",
    "get_state_dir",
    "get_log_dir",
    "get_profiles_dir",
]
