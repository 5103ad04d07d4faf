"""Configuration loading for shadowlink.

This module handles loading configuration from YAML files and
environment variables.

Contract:
- Inputs: Config file paths, environment variables
- Outputs: ShadowlinkSettings objects
- Side Effects: Creates default config file if missing
"""

import logging
import os
from pathlib import Path

import yaml

from ..storage.paths import get_config_dir
from .settings import ShadowlinkSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = """# shadowlink configuration
# Environment variables prefixed with SHADOWLINK_ override these values
# (nested keys use a double underscore, e.g. SHADOWLINK_FEATURE__ROUTE)

log_level: "info"
log_to_file: false

# Profile store directory
# Default: $SHADOWLINK_HOME/state/profiles
# store_dir: "~/.shadowlink/profiles"

# Copy these settings onto every imported profile
use_feature_template: false
feature:
  route: "all"
  ipv6: false
  metered: false
  proxy_apps: false
  bypass: false
  individual: ""
  udpdns: false
"""


def get_config_path() -> Path:
    """Get path to config file.

    Returns:
        Path to shadowlink.yaml in config directory

    Example:
        >>> config_path = get_config_path()
        >>> assert config_path.name == "shadowlink.yaml"
    """
    return get_config_dir() / "shadowlink.yaml"


def create_default_config() -> None:
    """Create default config file if it doesn't exist."""
    config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Config file already exists: {config_path}")
        return

    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Created default config: {config_path}")


def load_config(config_path: Path | None = None) -> ShadowlinkSettings:
    """Load configuration from YAML and environment.

    Environment variables take precedence over YAML settings.
    Variables should be prefixed with SHADOWLINK_ (e.g., SHADOWLINK_LOG_LEVEL).

    Args:
        config_path: Optional config file path (default: shadowlink.yaml in config dir)

    Returns:
        Validated settings

    Example:
        >>> settings = load_config()
        >>> assert isinstance(settings, ShadowlinkSettings)
    """
    if config_path is None:
        config_path = get_config_path()
        if not config_path.exists():
            create_default_config()

    yaml_settings = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}")
        except Exception as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.info("Using default settings and environment variables")

    # Only pass YAML values that don't have corresponding env vars (nested ones included)
    filtered_yaml = {}
    for key, value in yaml_settings.items():
        env_key = f"SHADOWLINK_{key.upper()}"
        if env_key not in os.environ and not any(name.startswith(f"{env_key}__") for name in os.environ):
            filtered_yaml[key] = value

    settings = ShadowlinkSettings(**filtered_yaml)

    logger.debug(
        f"Configuration loaded: log_level={settings.log_level}, store_dir={settings.store_dir}, "
        f"use_feature_template={settings.use_feature_template}"
    )

    return settings
