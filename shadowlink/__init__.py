"""Shadowlink library.

Parses shadowsocks profiles out of share-links and JSON configs,
encodes them back, and links imported profiles to their UDP fallbacks.

Public Interface:
    Modules:
    - models: Profile record and plugin options
    - parsing: Share-link and JSON config codecs
    - services: Import/export and fallback resolution
    - storage: JSON-based profile persistence
    - config: Configuration loading
    - editing: Editing buffer glue
"""

# Re-export key types for convenience
from .models import Profile
from .models import SubscriptionStatus
from .parsing import ParseResult
from .parsing import ProfileImportError
from .parsing import decode_json
from .parsing import decode_link
from .parsing import encode_json
from .parsing import encode_link
from .parsing import find_all_links

__all__ = [
    "ParseResult",
    "Profile",
    "ProfileImportError",
    "SubscriptionStatus",
    "decode_json",
    "decode_link",
    "encode_json",
    "encode_link",
    "find_all_links",
]
