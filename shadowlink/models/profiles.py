"""Profile models for proxy endpoint records.

A Profile describes one shadowsocks endpoint plus the routing policy
used when connecting through it. Profiles are produced by the share-link
and JSON config codecs (with id=0) and receive a non-zero id once the
profile store persists them.
"""

from datetime import datetime
from enum import IntEnum

from pydantic import Field

from shadowlink.models.base import CamelCaseModel

# Contextual settings copied from a feature template onto parsed profiles
FEATURE_FIELDS = ("route", "ipv6", "metered", "proxy_apps", "bypass", "individual", "udpdns")


class SubscriptionStatus(IntEnum):
    """Subscription management state of a profile.

    Persisted as its integer value:
    - USER_CONFIGURED: Added by the user directly
    - ACTIVE: Managed by a subscription that still lists it
    - OBSOLETE: No longer present in subscriptions
    """

    USER_CONFIGURED = 0
    ACTIVE = 1
    OBSOLETE = 2

    @classmethod
    def of(cls, value: int) -> "SubscriptionStatus":
        """Look up a status by its persisted value.

        Raises:
            ValueError: If no status has this value
        """
        return cls(value)


class Profile(CamelCaseModel):
    """Canonical proxy profile record.

    User-configurable fields are edited through the editing buffer and
    exchanged through the codecs. Managed fields are maintained by the
    profile store and traffic accounting.
    """

    id: int = Field(default=0, description="Store identifier (0 until persisted)")

    # user configurable fields
    name: str | None = Field(default="", description="Display label")
    host: str = Field(default="example.shadowsocks.org", description="Server host, IPv6 literals unbracketed")
    remote_port: int = Field(default=8388, ge=1, le=65535, description="Server port")
    password: str = Field(default="u1rRWTssNv0p", description="Server password")
    method: str = Field(default="aes-256-cfb", description="Cipher identifier")
    route: str = Field(default="all", description="Routing policy tag")
    remote_dns: str = Field(default="dns.google", description="Remote DNS server")
    proxy_apps: bool = Field(default=False, description="Per-app proxy enabled")
    bypass: bool = Field(default=False, description="Per-app list is a bypass list")
    udpdns: bool = Field(default=False, description="Forward DNS over UDP")
    ipv6: bool = Field(default=False, description="Route IPv6 traffic")
    metered: bool = Field(default=False, description="Report connection as metered")
    individual: str = Field(default="", description="Newline-delimited app identifiers")
    plugin: str | None = Field(default=None, description="Serialized plugin configuration")
    udp_fallback: int | None = Field(default=None, description="Id of the profile used for UDP traffic")

    # managed fields
    subscription: SubscriptionStatus = Field(default=SubscriptionStatus.USER_CONFIGURED)
    tx: int = Field(default=0, description="Bytes sent")
    rx: int = Field(default=0, description="Bytes received")
    user_order: int = Field(default=0, description="Sort key")

    # not persisted, only used while editing
    dirty: bool = Field(default=False, exclude=True)

    @property
    def formatted_address(self) -> str:
        """Host and port, with IPv6 hosts bracketed."""
        if ":" in self.host:
            return f"[{self.host}]:{self.remote_port}"
        return f"{self.host}:{self.remote_port}"

    @property
    def formatted_name(self) -> str:
        """Display name, falling back to the address."""
        return self.name or self.formatted_address

    def feature_settings(self) -> dict[str, str | bool]:
        """Contextual settings that propagate to newly parsed profiles."""
        return {field: getattr(self, field) for field in FEATURE_FIELDS}

    def copy_feature_settings_to(self, profile: "Profile") -> None:
        """Copy this profile's contextual settings onto another profile in place."""
        for field, value in self.feature_settings().items():
            setattr(profile, field, value)

    def to_uri(self) -> str:
        """Encode as an ``ss://`` share-link."""
        from shadowlink.parsing.uri import encode_link

        return encode_link(self)

    def __str__(self) -> str:
        return self.to_uri()


def apply_template(target: Profile, template: Profile | None) -> Profile:
    """Return a copy of target carrying the template's contextual settings.

    Args:
        target: Profile receiving the settings
        template: Feature template (None leaves target unchanged)

    Returns:
        New Profile; neither argument is modified

    Example:
        >>> template = Profile(route="bypass-lan", ipv6=True)
        >>> apply_template(Profile(), template).route
        'bypass-lan'
    """
    if template is None:
        return target.model_copy()
    return target.model_copy(update=template.feature_settings())


class ProfileIndex(CamelCaseModel):
    """On-disk index of all stored profiles.

    Stored in state/profiles/index.json and rewritten atomically on
    every change.
    """

    profiles: dict[int, Profile] = Field(default_factory=dict, description="Map of profile id to profile")
    next_id: int = Field(default=1, description="Identifier assigned to the next created profile")
    last_updated: datetime = Field(default_factory=datetime.now, description="Last index update timestamp")
