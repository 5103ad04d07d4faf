"""Editing buffer for profile fields.

While a profile is being edited its user-configurable fields live in a
flat key-value buffer rather than on the Profile itself.
serialize_profile pushes a profile into the buffer and
deserialize_profile pulls the edited values back.
"""

import logging

from shadowlink.models.profiles import Profile

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8388
MAX_PORT = 65535


class Key:
    """Field names used in the editing buffer."""

    NAME = "profileName"
    HOST = "proxy"
    REMOTE_PORT = "remotePortNum"
    PASSWORD = "sitekey"
    METHOD = "encMethod"
    ROUTE = "route"
    REMOTE_DNS = "remoteDns"
    PROXY_APPS = "isProxyApps"
    BYPASS = "isBypassApps"
    UDPDNS = "isUdpDns"
    IPV6 = "isIpv6"
    METERED = "metered"
    INDIVIDUAL = "Proxyed"
    PLUGIN = "plugin"
    UDP_FALLBACK = "udpFallback"
    DIRTY = "profileDirty"


class EditingConflictError(RuntimeError):
    """Raised when the buffer holds a different profile than the one being loaded."""


def parse_port(value: str | None, default: int, minimum: int = 1025) -> int:
    """Parse a port number, falling back to default when out of range.

    Example:
        >>> parse_port("8388", 1080, 1)
        8388
        >>> parse_port("80", 1080)
        1080
    """
    try:
        port = int(value) if value is not None else default
    except ValueError:
        port = default
    if port < minimum or port > MAX_PORT:
        return default
    return port


class EditingBuffer:
    """In-memory key-value store holding the profile being edited.

    Attributes:
        editing_id: Id of the profile currently in the buffer, or None
    """

    def __init__(self) -> None:
        self._values: dict[str, str | bool] = {}
        self.editing_id: int | None = None

    def get_string(self, key: str) -> str | None:
        value = self._values.get(key)
        return value if isinstance(value, str) else None

    def put_string(self, key: str, value: str | None) -> None:
        if value is None:
            self.remove(key)
        else:
            self._values[key] = value

    def get_boolean(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        return value if isinstance(value, bool) else default

    def put_boolean(self, key: str, value: bool) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._values


def serialize_profile(profile: Profile, buffer: EditingBuffer) -> None:
    """Push every user-configurable field of a profile into the buffer."""
    buffer.editing_id = profile.id
    buffer.put_string(Key.NAME, profile.name)
    buffer.put_string(Key.HOST, profile.host)
    buffer.put_string(Key.REMOTE_PORT, str(profile.remote_port))
    buffer.put_string(Key.PASSWORD, profile.password)
    buffer.put_string(Key.ROUTE, profile.route)
    buffer.put_string(Key.REMOTE_DNS, profile.remote_dns)
    buffer.put_string(Key.METHOD, profile.method)
    buffer.put_boolean(Key.PROXY_APPS, profile.proxy_apps)
    buffer.put_boolean(Key.BYPASS, profile.bypass)
    buffer.put_boolean(Key.UDPDNS, profile.udpdns)
    buffer.put_boolean(Key.IPV6, profile.ipv6)
    buffer.put_boolean(Key.METERED, profile.metered)
    buffer.put_string(Key.INDIVIDUAL, profile.individual)
    buffer.put_string(Key.PLUGIN, profile.plugin or "")
    buffer.put_string(Key.UDP_FALLBACK, None if profile.udp_fallback is None else str(profile.udp_fallback))
    buffer.remove(Key.DIRTY)
    logger.debug(f"Loaded profile {profile.id} into editing buffer")


def deserialize_profile(profile: Profile, buffer: EditingBuffer) -> None:
    """Pull edited fields from the buffer back onto a profile.

    Missing values read as empty strings or False, never as Profile defaults.

    Raises:
        EditingConflictError: If profile is persisted and not the one being edited
    """
    if profile.id != 0 and buffer.editing_id != profile.id:
        raise EditingConflictError(f"Editing buffer holds profile {buffer.editing_id}, not {profile.id}")
    buffer.editing_id = None

    profile.name = buffer.get_string(Key.NAME) or ""
    # hostnames never carry leading or trailing whitespace
    profile.host = (buffer.get_string(Key.HOST) or "").strip()
    profile.remote_port = parse_port(buffer.get_string(Key.REMOTE_PORT), DEFAULT_PORT, 1)
    profile.password = buffer.get_string(Key.PASSWORD) or ""
    profile.method = buffer.get_string(Key.METHOD) or ""
    profile.route = buffer.get_string(Key.ROUTE) or ""
    profile.remote_dns = buffer.get_string(Key.REMOTE_DNS) or ""
    profile.proxy_apps = buffer.get_boolean(Key.PROXY_APPS)
    profile.bypass = buffer.get_boolean(Key.BYPASS)
    profile.udpdns = buffer.get_boolean(Key.UDPDNS)
    profile.ipv6 = buffer.get_boolean(Key.IPV6)
    profile.metered = buffer.get_boolean(Key.METERED)
    profile.individual = buffer.get_string(Key.INDIVIDUAL) or ""
    profile.plugin = buffer.get_string(Key.PLUGIN) or ""
    udp_fallback = buffer.get_string(Key.UDP_FALLBACK)
    profile.udp_fallback = int(udp_fallback) if udp_fallback else None
