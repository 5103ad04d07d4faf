"""Profile management service.

Ties the codecs to a profile store: imports share-links and JSON
configs, exports stored profiles back to both formats, and assigns
ids and sort order on creation.
"""

import logging

from shadowlink.models.profiles import Profile
from shadowlink.parsing.json_config import ParseResult
from shadowlink.parsing.json_config import decode_json
from shadowlink.parsing.json_config import dumps_profiles
from shadowlink.parsing.scanner import find_all_links
from shadowlink.services.fallback_resolver import FallbackResolver
from shadowlink.storage.profile_store import ProfileStore

logger = logging.getLogger(__name__)


class ProfileService:
    """Profile management on top of a ProfileStore."""

    def __init__(self, store: ProfileStore) -> None:
        """Initialize profile service.

        Args:
            store: Store the service reads from and writes to
        """
        self.store = store
        self.resolver = FallbackResolver(store)

    def create_profile(self, profile: Profile) -> Profile:
        """Persist a profile at the end of the sort order.

        Args:
            profile: Profile to store (modified in place)

        Returns:
            The same profile with id and user_order assigned
        """
        profile.user_order = self.store.next_order() or 0
        profile.id = self.store.create(profile)
        logger.info(f"Created profile {profile.id}: {profile.formatted_name}")
        return profile

    def get_profile(self, id: int) -> Profile | None:
        return self.store.get(id)

    def update_profile(self, profile: Profile) -> bool:
        """Persist changes to a stored profile.

        Returns:
            True if the profile existed and was updated
        """
        return self.store.update(profile) > 0

    def delete_profile(self, id: int) -> bool:
        """Delete a profile.

        UDP fallback references to it are left dangling; exports skip them.

        Returns:
            True if deleted, False if not found
        """
        if self.store.delete(id) == 0:
            return False

        logger.info(f"Deleted profile {id}")
        return True

    def clear_profiles(self) -> int:
        count = self.store.delete_all()
        logger.info(f"Deleted {count} profiles")
        return count

    def list_profiles(self, include_obsolete: bool = False) -> list[Profile]:
        if include_obsolete:
            return self.store.list_all()
        return self.store.list_active()

    # --- Import ---

    def import_links(self, text: str, feature: Profile | None = None) -> list[Profile]:
        """Persist every share-link found in text.

        Args:
            text: Arbitrary text containing ``ss://`` links
            feature: Template whose contextual settings are copied onto each profile

        Returns:
            Created profiles in order of appearance
        """
        created = [self.create_profile(profile) for profile in find_all_links(text, feature)]
        logger.info(f"Imported {len(created)} profiles from share-links")
        return created

    def import_json(self, text: str, feature: Profile | None = None) -> list[Profile]:
        """Persist every profile in a JSON config and resolve UDP fallbacks.

        Raises:
            ProfileImportError: If the text is not valid JSON
        """
        return self.import_result(decode_json(text, feature))

    def import_result(self, result: ParseResult) -> list[Profile]:
        created = self.resolver.import_result(result, self.create_profile)
        logger.info(f"Imported {len(created)} profiles from JSON config")
        return created

    # --- Export ---

    def export_links(self, profiles: list[Profile] | None = None) -> list[str]:
        """Share-links for the given profiles (default: all active profiles)."""
        if profiles is None:
            profiles = self.store.list_active()
        return [profile.to_uri() for profile in profiles]

    def export_json(self, profiles: list[Profile] | None = None) -> str:
        """Full-schema JSON array for the given profiles (default: all active profiles)."""
        if profiles is None:
            profiles = self.store.list_active()
        lookup = {profile.id: profile for profile in self.store.list_all()}
        return dumps_profiles(profiles, lookup)
