"""Share-link codec for ``ss://`` URIs.

Two wire forms are decoded:
- Legacy: ``ss://BASE64(method:password@host:port)[?plugin=...][#name]``
- Modern (SIP002): ``ss://BASE64URL(method:password)@host:port[?plugin=...][#name]``

Links are always encoded in the modern form.

Contract:
- Inputs: A single link string, optional feature template profile
- Outputs: Profile, or None when the link cannot be decoded
- Side Effects: Rejected links are logged as warnings
"""

import base64
import logging
import re
from urllib.parse import parse_qs
from urllib.parse import quote
from urllib.parse import unquote
from urllib.parse import urlsplit

from shadowlink.models.plugins import PluginConfiguration
from shadowlink.models.profiles import Profile
from shadowlink.models.profiles import apply_template

logger = logging.getLogger(__name__)

SCHEME = "ss"
PLUGIN_KEY = "plugin"
MAX_PORT = 65535

USER_INFO_PATTERN = re.compile(r"(.+?):(.*)")
LEGACY_PATTERN = re.compile(r"(.+?):(.*)@(.+?):(\d+?)", re.ASCII)
HOST_PORT_PATTERN = re.compile(r"(\[[^\]]*\]|[^:\[\]]*):(\d+)", re.ASCII)

# Characters left unescaped in query values and fragments
URI_SAFE = "!'()*"


def unbracket_host(host: str) -> str:
    """Strip the brackets around an IPv6 literal."""
    if host.startswith("[") and host.endswith("]"):
        return host[1:-1]
    return host


def _b64decode(data: str, url_safe: bool) -> str:
    """Decode unpadded base64 text.

    Raises:
        binascii.Error: If data is not valid base64 for the alphabet
        UnicodeDecodeError: If the payload is not UTF-8
    """
    data = data.rstrip("=")
    padded = data + "=" * (-len(data) % 4)
    altchars = b"-_" if url_safe else None
    return base64.b64decode(padded, altchars=altchars, validate=True).decode("utf-8")


def _parse_port(text: str) -> int | None:
    port = int(text)
    if 0 < port <= MAX_PORT:
        return port
    return None


def _decode_legacy(link: str, encoded: str, feature: Profile | None) -> Profile | None:
    match = LEGACY_PATTERN.fullmatch(_b64decode(encoded, url_safe=False))
    if match is None:
        logger.warning(f"Unrecognized URI: {link}")
        return None

    method, password, host, port_text = match.groups()
    port = _parse_port(port_text)
    if port is None:
        logger.warning(f"Invalid port in URI: {link}")
        return None

    profile = apply_template(Profile(), feature)
    profile.method = method.lower()
    profile.password = password
    profile.host = unbracket_host(host)
    profile.remote_port = port
    return profile


def _decode_modern(link: str, user_info: str, host_info: str, feature: Profile | None) -> Profile | None:
    match = USER_INFO_PATTERN.fullmatch(_b64decode(user_info, url_safe=True))
    if match is None:
        logger.warning(f"Unknown user info: {link}")
        return None

    address = HOST_PORT_PATTERN.fullmatch(host_info)
    port = _parse_port(address.group(2)) if address is not None else None
    if port is None:
        logger.warning(f"Invalid URI: {link}")
        return None

    profile = apply_template(Profile(), feature)
    profile.method, profile.password = match.groups()
    profile.host = unbracket_host(address.group(1))
    profile.remote_port = port
    return profile


def decode_link(link: str, feature: Profile | None = None) -> Profile | None:
    """Decode a single share-link.

    Links carrying user info are decoded as the modern form, all others
    as the legacy form. Any failure rejects just this link.

    Args:
        link: ``ss://`` link text
        feature: Template whose contextual settings are copied onto the result

    Returns:
        Decoded Profile (id=0), or None if the link is rejected

    Example:
        >>> profile = decode_link("ss://YWVzLTI1Ni1jZmI6dTFyUldUc3NOdjBw@example.shadowsocks.org:8388#MyServer")
        >>> profile.method, profile.password, profile.name
        ('aes-256-cfb', 'u1rRWTssNv0p', 'MyServer')
    """
    try:
        parts = urlsplit(link)
    except ValueError:
        logger.warning(f"Invalid URI: {link}")
        return None
    if parts.scheme.lower() != SCHEME:
        logger.warning(f"Unsupported scheme: {link}")
        return None

    user_info, has_user_info, host_info = parts.netloc.rpartition("@")
    try:
        if has_user_info:
            profile = _decode_modern(link, user_info, host_info, feature)
        else:
            profile = _decode_legacy(link, host_info.split(":", 1)[0], feature)
    except ValueError:  # binascii.Error, UnicodeDecodeError, non-ASCII input
        logger.warning(f"Invalid base64 detected: {link}")
        return None
    if profile is None:
        return None

    if not (profile.host and profile.password and profile.method):
        logger.warning(f"Incomplete profile in URI: {link}")
        return None

    profile.plugin = parse_qs(parts.query, keep_blank_values=True).get(PLUGIN_KEY, [None])[0]
    if "#" in link:
        profile.name = unquote(parts.fragment)
    elif has_user_info:
        profile.name = ""
    else:
        profile.name = None
    return profile


def encode_link(profile: Profile) -> str:
    """Encode a profile as a modern share-link.

    Args:
        profile: Profile to encode

    Returns:
        ``ss://`` link with base64url user info, plugin query and name fragment
    """
    credentials = f"{profile.method}:{profile.password}".encode()
    auth = base64.urlsafe_b64encode(credentials).decode("ascii").rstrip("=")
    host = f"[{profile.host}]" if ":" in profile.host else profile.host
    link = f"{SCHEME}://{auth}@{host}:{profile.remote_port}"

    configuration = PluginConfiguration(profile.plugin)
    if configuration.selected:
        options = configuration.get_options().to_string(trim_id=False)
        link += f"?{PLUGIN_KEY}={quote(options, safe=URI_SAFE)}"
    if profile.name:
        link += f"#{quote(profile.name, safe=URI_SAFE)}"
    return link
