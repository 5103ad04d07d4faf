"""UDP fallback resolution for imported profiles.

Imported profiles may declare a secondary endpoint for UDP traffic. The
resolver persists the batch first, then links each declared fallback to
a stored plugin-less profile with the same endpoint, creating one only
when no such profile exists yet. Fallbacks shared by several profiles in
one import therefore end up as a single stored profile.

Contract:
- Inputs: ParseResult, ProfileStore, create callback
- Outputs: Persisted top-level profiles with udp_fallback set
- Side Effects: Creates and updates profiles in the store
"""

import logging
from collections.abc import Callable

from shadowlink.models.profiles import Profile
from shadowlink.parsing.json_config import ParseResult
from shadowlink.storage.profile_store import ProfileStore

logger = logging.getLogger(__name__)

CreateProfile = Callable[[Profile], Profile]


def is_same_endpoint(candidate: Profile, fallback: Profile) -> bool:
    """Whether a stored profile can serve as the given fallback."""
    return (
        candidate.host == fallback.host
        and candidate.remote_port == fallback.remote_port
        and candidate.password == fallback.password
        and candidate.method == fallback.method
        and not candidate.plugin
    )


class FallbackResolver:
    """Persists parsed profiles and wires up their UDP fallbacks.

    The store's full profile list is read once per pending fallback, so
    imports touching the same store must be serialized by the caller.
    """

    def __init__(self, store: ProfileStore) -> None:
        self.store = store

    def import_result(self, result: ParseResult, create: CreateProfile) -> list[Profile]:
        """Persist a parse result and resolve its fallbacks.

        Args:
            result: Profiles and pending fallbacks from a codec
            create: Persists a profile and returns it with its assigned id

        Returns:
            Persisted top-level profiles in original order
        """
        persisted = [create(profile) for profile in result.profiles]

        for index, fallback in result.fallbacks.items():
            profile = persisted[index]
            if fallback.plugin:
                logger.warning(f"Ignoring UDP fallback with plugin for profile {profile.id}")
                continue
            profile.udp_fallback = self.resolve(fallback, create)
            self.store.update(profile)

        return persisted

    def resolve(self, fallback: Profile, create: CreateProfile) -> int:
        """Find or create the stored profile for a fallback endpoint.

        Returns:
            Id of the matching or newly created profile
        """
        match = next((p for p in self.store.list_all() if is_same_endpoint(p, fallback)), None)
        if match is not None:
            logger.debug(f"Reusing profile {match.id} as UDP fallback for {fallback.formatted_address}")
            return match.id

        created = create(fallback)
        logger.info(f"Created profile {created.id} as UDP fallback for {fallback.formatted_address}")
        return created.id
