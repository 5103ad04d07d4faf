"""Settings models for shadowlink.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pathlib import Path

from pydantic import BaseModel
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from shadowlink.models.profiles import Profile


class FeatureSettings(BaseModel):
    """Contextual settings applied to every imported profile.

    Attributes:
        route: Routing policy tag
        ipv6: Route IPv6 traffic
        metered: Report connection as metered
        proxy_apps: Per-app proxy enabled
        bypass: Per-app list is a bypass list
        individual: Newline-delimited app identifiers
        udpdns: Forward DNS over UDP
    """

    route: str = "all"
    ipv6: bool = False
    metered: bool = False
    proxy_apps: bool = False
    bypass: bool = False
    individual: str = ""
    udpdns: bool = False

    def to_template(self) -> Profile:
        """Build a feature template profile carrying these settings."""
        return Profile(**self.model_dump())


class ShadowlinkSettings(BaseSettings):
    """Configuration for shadowlink.

    Attributes:
        log_level: Logging level (default: info)
        log_to_file: Also write logs to $SHADOWLINK_HOME/logs/shadowlink.log
        store_dir: Profile store directory (default: $SHADOWLINK_HOME/state/profiles)
        use_feature_template: Apply feature settings to imported profiles
        feature: Feature template settings

    Example:
        >>> settings = ShadowlinkSettings()
        >>> assert settings.log_level == "info"
        >>> assert settings.feature.route == "all"
    """

    model_config = SettingsConfigDict(
        env_prefix="SHADOWLINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "info"
    log_to_file: bool = False
    store_dir: str | None = None

    use_feature_template: bool = False
    feature: FeatureSettings = FeatureSettings()

    @field_validator("store_dir")
    @classmethod
    def expand_and_resolve_path(cls, v: str | None) -> str | None:
        """Expand ~ and resolve to absolute path."""
        if v is None:
            return None
        return str(Path(v).expanduser().resolve())

    def feature_template(self) -> Profile | None:
        """Feature template for imports, or None when disabled."""
        if not self.use_feature_template:
            return None
        return self.feature.to_template()
