"""Codec for shadowsocks JSON configuration documents.

Any JSON object carrying non-empty ``server``, ``password`` and
``method`` plus a positive ``server_port`` is a profile. Objects that are
not profiles, and arrays, are searched recursively for nested profiles.
A profile's ``udp_fallback`` object is parsed separately and returned as
a pending fallback instead of a top-level profile.

Contract:
- Inputs: JSON text (one or more concatenated documents), optional feature template
- Outputs: ParseResult with top-level profiles and pending fallbacks by index
- Side Effects: None
"""

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from shadowlink.models.plugins import PluginConfiguration
from shadowlink.models.plugins import PluginOptions
from shadowlink.models.profiles import Profile
from shadowlink.models.profiles import apply_template
from shadowlink.parsing.uri import MAX_PORT
from shadowlink.parsing.uri import unbracket_host

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s*")


class ProfileImportError(ValueError):
    """Raised when a JSON document cannot be parsed at all."""


@dataclass
class ParseResult:
    """Profiles found in a JSON document.

    Attributes:
        profiles: Top-level profiles in document order
        fallbacks: Pending fallback profile by index into profiles
    """

    profiles: list[Profile] = field(default_factory=list)
    fallbacks: dict[int, Profile] = field(default_factory=dict)


def _as_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict | list):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _opt_str(obj: Mapping[str, Any], key: str, default: str = "") -> str:
    value = obj.get(key)
    return default if value is None else _as_string(value)


def _opt_int(obj: Mapping[str, Any], key: str) -> int:
    value = obj.get(key)
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            return int(float(value.strip()))
    except (ValueError, OverflowError):
        pass
    return 0


def _opt_bool(obj: Mapping[str, Any], key: str, default: bool) -> bool:
    value = obj.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return default


class JsonConfigParser:
    """Walks decoded JSON values collecting profiles.

    Example:
        >>> parser = JsonConfigParser()
        >>> parser.process({"a": {"server": "h", "server_port": 1, "password": "p", "method": "m"}})
        >>> len(parser.result.profiles)
        1
    """

    def __init__(self, feature: Profile | None = None) -> None:
        self.feature = feature
        self.result = ParseResult()

    def process(self, value: Any) -> None:
        """Collect profiles from a JSON value of any type, in document order."""
        pending = [value]
        while pending:
            value = pending.pop()
            if isinstance(value, dict):
                profile = self.try_parse(value)
                if profile is None:
                    pending.extend(reversed(list(value.values())))
                    continue

                fallback_obj = value.get("udp_fallback")
                if isinstance(fallback_obj, dict):
                    self._add_fallback(profile, fallback_obj)
                self.result.profiles.append(profile)
            elif isinstance(value, list):
                pending.extend(reversed(value))

    def _add_fallback(self, profile: Profile, obj: Mapping[str, Any]) -> None:
        fallback = self.try_parse(obj, fallback=True)
        if fallback is None:
            logger.warning(f"Ignoring invalid udp_fallback of {profile.formatted_address}")
        elif fallback.plugin:
            # fallback profiles never use a plugin
            logger.warning(f"Ignoring udp_fallback with plugin of {profile.formatted_address}")
        else:
            self.result.fallbacks[len(self.result.profiles)] = fallback

    def try_parse(self, obj: Mapping[str, Any], fallback: bool = False) -> Profile | None:
        """Interpret one JSON object as a profile.

        Args:
            obj: Decoded JSON object
            fallback: Parse as a UDP fallback, skipping top-level-only settings

        Returns:
            Profile, or None if a required field is missing or invalid
        """
        host = unbracket_host(_opt_str(obj, "server"))
        if not host:
            return None
        remote_port = _opt_int(obj, "server_port")
        if not 0 < remote_port <= MAX_PORT:
            return None
        password = _opt_str(obj, "password")
        if not password:
            return None
        method = _opt_str(obj, "method")
        if not method:
            return None

        profile = Profile(host=host, remote_port=remote_port, password=password, method=method)
        if self.feature is not None:
            profile = apply_template(profile, self.feature)

        plugin_id = _opt_str(obj, "plugin")
        if plugin_id:
            profile.plugin = PluginOptions.with_id(plugin_id, _opt_str(obj, "plugin_opts")).to_string(trim_id=False)
        profile.name = _opt_str(obj, "remarks")
        profile.route = _opt_str(obj, "route", profile.route)
        if fallback:
            return profile

        profile.remote_dns = _opt_str(obj, "remote_dns", profile.remote_dns)
        profile.ipv6 = _opt_bool(obj, "ipv6", profile.ipv6)
        profile.metered = _opt_bool(obj, "metered", profile.metered)
        proxy_apps = obj.get("proxy_apps")
        if isinstance(proxy_apps, dict):
            profile.proxy_apps = _opt_bool(proxy_apps, "enabled", profile.proxy_apps)
            profile.bypass = _opt_bool(proxy_apps, "bypass", profile.bypass)
            android_list = proxy_apps.get("android_list")
            if isinstance(android_list, list):
                profile.individual = "\n".join("" if item is None else _as_string(item) for item in android_list)
        profile.udpdns = _opt_bool(obj, "udpdns", profile.udpdns)
        return profile


def decode_json(text: str, feature: Profile | None = None) -> ParseResult:
    """Decode every profile in a JSON config document.

    Args:
        text: One or more concatenated JSON values
        feature: Template whose contextual settings are copied onto each profile

    Returns:
        ParseResult with top-level profiles and their pending fallbacks

    Raises:
        ProfileImportError: If the text is not valid JSON
    """
    parser = JsonConfigParser(feature)
    decoder = json.JSONDecoder()
    position = WHITESPACE.match(text).end()
    while position < len(text):
        try:
            value, position = decoder.raw_decode(text, position)
        except json.JSONDecodeError as e:
            raise ProfileImportError(f"Invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e
        except RecursionError as e:
            raise ProfileImportError(f"JSON nested too deeply at position {position}") from e
        parser.process(value)
        position = WHITESPACE.match(text, position).end()

    logger.info(
        f"Decoded {len(parser.result.profiles)} profiles ({len(parser.result.fallbacks)} with UDP fallback) from JSON"
    )
    return parser.result


def encode_json(profile: Profile, profiles: Mapping[int, Profile] | None = None) -> dict[str, Any]:
    """Encode a profile as a JSON config object.

    Without a profile lookup only the connection fields are written.
    With one, the full schema is written and a plugin-less UDP fallback
    found in the lookup is nested under ``udp_fallback``.

    Args:
        profile: Profile to encode
        profiles: Stored profiles by id, used to resolve udp_fallback

    Returns:
        JSON-compatible dict
    """
    result: dict[str, Any] = {
        "server": profile.host,
        "server_port": profile.remote_port,
        "password": profile.password,
        "method": profile.method,
    }
    if profiles is None:
        return result

    options = PluginConfiguration(profile.plugin).get_options()
    if options.id:
        result["plugin"] = options.id
        result["plugin_opts"] = options.to_string()
    if profile.name is not None:
        result["remarks"] = profile.name
    result["route"] = profile.route
    result["remote_dns"] = profile.remote_dns
    result["ipv6"] = profile.ipv6
    result["metered"] = profile.metered
    proxy_apps: dict[str, Any] = {"enabled": profile.proxy_apps}
    if profile.proxy_apps:
        proxy_apps["bypass"] = profile.bypass
        # android_ prefix because app identifiers are Android package names
        proxy_apps["android_list"] = profile.individual.split("\n")
    result["proxy_apps"] = proxy_apps
    result["udpdns"] = profile.udpdns

    if profile.udp_fallback is not None:
        fallback = profiles.get(profile.udp_fallback)
        if fallback is not None and not fallback.plugin:
            result["udp_fallback"] = encode_json(fallback)
    return result


def dumps_profiles(profiles: list[Profile], lookup: Mapping[int, Profile]) -> str:
    """Render profiles as an indented JSON array in the full schema."""
    return json.dumps([encode_json(profile, lookup) for profile in profiles], indent=2, ensure_ascii=False)
