"""Profile persistence.

Contract:
- Inputs: Profiles to create/update, profile ids
- Outputs: Stored profiles, assigned ids, affected-row counts
- Side Effects: Rewrites {storage_dir}/index.json atomically on every change
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

from shadowlink.models.profiles import Profile
from shadowlink.models.profiles import ProfileIndex
from shadowlink.models.profiles import SubscriptionStatus

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    """Record store for profiles, keyed by integer id."""

    def get(self, id: int) -> Profile | None: ...

    def list_active(self) -> list[Profile]: ...

    def list_all(self) -> list[Profile]: ...

    def next_order(self) -> int | None: ...

    def is_not_empty(self) -> bool: ...

    def create(self, profile: Profile) -> int: ...

    def update(self, profile: Profile) -> int: ...

    def delete(self, id: int) -> int: ...

    def delete_all(self) -> int: ...


class JsonProfileStore:
    """ProfileStore kept in a single JSON index file.

    Storage structure:
        {storage_dir}/
            index.json      # All profiles by id, plus the next id

    Stored profiles are copies; callers never share instances with the store.
    """

    def __init__(self, storage_dir: Path) -> None:
        """Initialize with storage directory.

        Args:
            storage_dir: Directory holding index.json (created if missing)
        """
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.index_path = self.storage_dir / "index.json"

    def get(self, id: int) -> Profile | None:
        """Get profile by id.

        Returns:
            Profile if found, None otherwise
        """
        profile = self._load_index().profiles.get(id)
        return profile.model_copy() if profile is not None else None

    def list_active(self) -> list[Profile]:
        """List profiles not marked obsolete, ordered by user_order."""
        profiles = [p for p in self.list_all() if p.subscription != SubscriptionStatus.OBSOLETE]
        return sorted(profiles, key=lambda p: p.user_order)

    def list_all(self) -> list[Profile]:
        """List every stored profile in id order."""
        index = self._load_index()
        return [index.profiles[id].model_copy() for id in sorted(index.profiles)]

    def next_order(self) -> int | None:
        """Sort key after the largest stored user_order (None when empty)."""
        profiles = self._load_index().profiles
        if not profiles:
            return None
        return max(p.user_order for p in profiles.values()) + 1

    def is_not_empty(self) -> bool:
        return bool(self._load_index().profiles)

    def create(self, profile: Profile) -> int:
        """Insert a profile under a newly assigned id.

        The id carried by the given profile is ignored and the profile
        itself is not modified.

        Returns:
            Assigned id
        """
        index = self._load_index(for_write=True)
        profile_id = index.next_id
        index.profiles[profile_id] = profile.model_copy(update={"id": profile_id, "dirty": False})
        index.next_id = profile_id + 1
        self._save_index(index)

        logger.debug(f"Created profile {profile_id} ({profile.formatted_address})")
        return profile_id

    def update(self, profile: Profile) -> int:
        """Replace the stored profile with the same id.

        Returns:
            1 if updated, 0 if no profile has this id
        """
        index = self._load_index(for_write=True)
        if profile.id not in index.profiles:
            logger.warning(f"Cannot update missing profile {profile.id}")
            return 0

        index.profiles[profile.id] = profile.model_copy(update={"dirty": False})
        self._save_index(index)
        return 1

    def delete(self, id: int) -> int:
        """Delete profile by id.

        Returns:
            1 if deleted, 0 if not found
        """
        index = self._load_index(for_write=True)
        if id not in index.profiles:
            return 0

        del index.profiles[id]
        self._save_index(index)
        logger.debug(f"Deleted profile {id}")
        return 1

    def delete_all(self) -> int:
        """Delete every profile.

        Returns:
            Number of profiles deleted
        """
        index = self._load_index(for_write=True)
        count = len(index.profiles)
        index.profiles.clear()
        self._save_index(index)
        return count

    # --- Index Management ---

    def _load_index(self, for_write: bool = False) -> ProfileIndex:
        """Load profile index from disk.

        An unreadable index is moved aside before a write replaces it, so
        its contents can still be recovered by hand.

        Args:
            for_write: Caller is about to save the returned index

        Returns:
            ProfileIndex (empty if file doesn't exist or is unreadable)
        """
        if not self.index_path.exists():
            return ProfileIndex()

        try:
            data = json.loads(self.index_path.read_text(encoding="utf-8"))
            return ProfileIndex.model_validate(data)
        except Exception as e:
            logger.error(f"Failed to load profile index {self.index_path}: {e}")
            if for_write:
                backup_path = self.index_path.with_name(f"index.json.corrupt-{datetime.now():%Y%m%dT%H%M%S%f}")
                self.index_path.replace(backup_path)
                logger.warning(f"Moved unreadable profile index to {backup_path}")
            return ProfileIndex()

    def _save_index(self, index: ProfileIndex) -> None:
        """Save profile index to disk atomically."""
        index.last_updated = datetime.now()

        tmp_path = self.index_path.with_suffix(".tmp")
        tmp_path.write_text(index.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        tmp_path.replace(self.index_path)
