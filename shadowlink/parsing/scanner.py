"""Share-link discovery in free text."""

import logging
import re
from collections.abc import Iterator

from shadowlink.models.profiles import Profile
from shadowlink.parsing.uri import decode_link

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(
    r"ss://[-a-zA-Z0-9+&@#/%?=.~*'()|!:,;_\[\]]*[-a-zA-Z0-9+&@#/%=.~*'()|\[\]]",
    re.IGNORECASE,
)


class LinkScan:
    """Lazy, restartable sequence of profiles decoded from text.

    Every iteration re-scans the text from the start, so iterating twice
    yields the same profiles. Candidates that fail to decode are skipped.
    """

    def __init__(self, text: str, feature: Profile | None = None) -> None:
        self.text = text
        self.feature = feature

    def __iter__(self) -> Iterator[Profile]:
        for match in LINK_PATTERN.finditer(self.text):
            profile = decode_link(match.group(), self.feature)
            if profile is not None:
                yield profile

    def candidates(self) -> list[str]:
        """All substrings that look like share-links, decodable or not."""
        return [match.group() for match in LINK_PATTERN.finditer(self.text)]


def find_all_links(text: str | None, feature: Profile | None = None) -> LinkScan:
    """Find every decodable share-link in arbitrary text.

    Args:
        text: Input text (None is treated as empty)
        feature: Template whose contextual settings are copied onto each profile

    Returns:
        Restartable iterable of decoded profiles, in order of appearance

    Example:
        >>> links = find_all_links("check out ss://YWVzLTI1Ni1jZmI6dTFyUldUc3NOdjBw@example.shadowsocks.org:8388")
        >>> [profile.host for profile in links]
        ['example.shadowsocks.org']
    """
    scan = LinkScan(text or "", feature)
    logger.debug(f"Scanning {len(scan.text)} characters for share-links")
    return scan
