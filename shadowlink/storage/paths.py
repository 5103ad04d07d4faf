"""Path resolution for shadowlink storage locations.

This module provides path resolution based on the SHADOWLINK_HOME
environment variable, following an XDG-like directory structure within
that root.

Contract:
- Inputs: Environment variables (SHADOWLINK_HOME and per-directory overrides)
- Outputs: Resolved Path objects
- Side Effects: Creates directories if they don't exist
"""

import os
from pathlib import Path


def get_home_dir() -> Path:
    """Get SHADOWLINK_HOME from environment.

    Returns:
        Path to root directory (default: .shadowlink)
    """
    root = os.environ.get("SHADOWLINK_HOME", ".shadowlink")
    return Path(root).resolve()


def _resolve_dir(default: Path, env_var: str) -> Path:
    directory = default
    env_override: str | None = os.environ.get(env_var)
    if env_override is not None:
        directory = Path(env_override).resolve()

    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_config_dir() -> Path:
    """Get configuration directory.

    Returns:
        Path to config directory ($SHADOWLINK_HOME/config)

    Environment Variables:
        SHADOWLINK_CONFIG_DIR: Override config directory location
    """
    return _resolve_dir(get_home_dir() / "config", "SHADOWLINK_CONFIG_DIR")


def get_state_dir() -> Path:
    """Get state directory.

    Returns:
        Path to state directory ($SHADOWLINK_HOME/state)

    Environment Variables:
        SHADOWLINK_STATE_DIR: Override state directory location
    """
    return _resolve_dir(get_home_dir() / "state", "SHADOWLINK_STATE_DIR")


def get_log_dir() -> Path:
    """Get log directory.

    Returns:
        Path to log directory ($SHADOWLINK_HOME/logs)

    Example:
        >>> log_dir = get_log_dir()
        >>> assert log_dir.name == "logs" or "SHADOWLINK_LOG_DIR" in os.environ
    """
    return _resolve_dir(get_home_dir() / "logs", "SHADOWLINK_LOG_DIR")


def get_profiles_dir() -> Path:
    """Get profile store directory.

    Returns:
        Path to profile store ($SHADOWLINK_HOME/state/profiles)
    """
    profiles_dir = get_state_dir() / "profiles"
    profiles_dir.mkdir(parents=True, exist_ok=True)
    return profiles_dir
