"""Parsing module for shadowlink.

Converts between profiles and their two external text formats.

Public Interface:
    - decode_link / encode_link: ``ss://`` share-link codec
    - find_all_links: Lazy share-link discovery in free text
    - decode_json / encode_json: JSON config codec
    - ParseResult: Profiles plus pending UDP fallbacks
    - ProfileImportError: Unparseable JSON document
"""

from .json_config import ParseResult
from .json_config import ProfileImportError
from .json_config import decode_json
from .json_config import dumps_profiles
from .json_config import encode_json
from .scanner import LinkScan
from .scanner import find_all_links
from .uri import decode_link
from .uri import encode_link

__all__ = [
    "LinkScan",
    "ParseResult",
    "ProfileImportError",
    "decode_json",
    "decode_link",
    "dumps_profiles",
    "encode_json",
    "encode_link",
    "find_all_links",
]
