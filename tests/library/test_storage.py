"""
Unit tests for storage layer (paths and profile store).

Tests path resolution, JSON persistence and atomic index writes.
"""

import json
import logging
from pathlib import Path

import pytest

from shadowlink.models.profiles import Profile
from shadowlink.models.profiles import SubscriptionStatus
from shadowlink.storage import paths
from shadowlink.storage.profile_store import JsonProfileStore


@pytest.mark.unit
class TestPaths:
    """Test path resolution functions."""

    def test_get_home_dir_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test get_home_dir returns .shadowlink when env var not set."""
        monkeypatch.delenv("SHADOWLINK_HOME", raising=False)
        assert paths.get_home_dir() == Path(".shadowlink").resolve()

    def test_get_home_dir_custom(self, mock_storage_env: Path) -> None:
        """Test get_home_dir respects SHADOWLINK_HOME environment variable."""
        assert paths.get_home_dir() == mock_storage_env.resolve()

    def test_get_config_dir_creates_directory(self, mock_storage_env: Path) -> None:
        config_dir = paths.get_config_dir()
        assert config_dir.is_dir()
        assert config_dir.name == "config"

    def test_get_state_dir_creates_directory(self, mock_storage_env: Path) -> None:
        state_dir = paths.get_state_dir()
        assert state_dir.is_dir()
        assert state_dir.name == "state"

    def test_get_log_dir_creates_directory(self, mock_storage_env: Path) -> None:
        log_dir = paths.get_log_dir()
        assert log_dir.is_dir()
        assert log_dir.name == "logs"

    def test_get_profiles_dir_under_state(self, mock_storage_env: Path) -> None:
        profiles_dir = paths.get_profiles_dir()
        assert profiles_dir.is_dir()
        assert profiles_dir.parent == paths.get_state_dir()

    def test_state_dir_override(self, mock_storage_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        override = mock_storage_env / "elsewhere"
        monkeypatch.setenv("SHADOWLINK_STATE_DIR", str(override))

        assert paths.get_state_dir() == override.resolve()
        assert override.is_dir()

    def test_paths_are_absolute(self, mock_storage_env: Path) -> None:
        assert paths.get_home_dir().is_absolute()
        assert paths.get_config_dir().is_absolute()
        assert paths.get_state_dir().is_absolute()
        assert paths.get_log_dir().is_absolute()


@pytest.mark.unit
class TestJsonProfileStore:
    """Test profile store operations."""

    def test_empty_store(self, store: JsonProfileStore) -> None:
        assert store.list_all() == []
        assert store.list_active() == []
        assert store.next_order() is None
        assert store.is_not_empty() is False
        assert store.get(1) is None

    def test_create_assigns_sequential_ids(self, store: JsonProfileStore) -> None:
        first = store.create(Profile(host="a"))
        second = store.create(Profile(host="b"))

        assert (first, second) == (1, 2)
        assert store.get(2).host == "b"
        assert store.is_not_empty() is True

    def test_create_does_not_modify_argument(self, store: JsonProfileStore) -> None:
        profile = Profile(id=42, host="a")

        profile_id = store.create(profile)

        assert profile.id == 42
        assert store.get(profile_id).id == profile_id

    def test_ids_not_reused_after_delete(self, store: JsonProfileStore) -> None:
        store.create(Profile())
        store.delete(1)

        assert store.create(Profile()) == 2

    def test_get_returns_copy(self, store: JsonProfileStore) -> None:
        profile_id = store.create(Profile(host="a"))

        store.get(profile_id).host = "changed"

        assert store.get(profile_id).host == "a"

    def test_update(self, store: JsonProfileStore) -> None:
        profile = store.get(store.create(Profile(host="a")))
        profile.host = "b"
        profile.udp_fallback = 5

        assert store.update(profile) == 1
        assert store.get(profile.id).host == "b"
        assert store.get(profile.id).udp_fallback == 5

    def test_update_missing(self, store: JsonProfileStore) -> None:
        assert store.update(Profile(id=99)) == 0
        assert store.list_all() == []

    def test_list_active_excludes_obsolete_and_sorts(self, store: JsonProfileStore) -> None:
        store.create(Profile(host="late", user_order=5))
        store.create(Profile(host="gone", user_order=1, subscription=SubscriptionStatus.OBSOLETE))
        store.create(Profile(host="early", user_order=2, subscription=SubscriptionStatus.ACTIVE))

        assert [p.host for p in store.list_active()] == ["early", "late"]
        assert [p.host for p in store.list_all()] == ["late", "gone", "early"]

    def test_next_order(self, store: JsonProfileStore) -> None:
        store.create(Profile(user_order=3))
        store.create(Profile(user_order=7))

        assert store.next_order() == 8

    def test_delete(self, store: JsonProfileStore) -> None:
        profile_id = store.create(Profile())

        assert store.delete(profile_id) == 1
        assert store.delete(profile_id) == 0
        assert store.get(profile_id) is None

    def test_delete_all(self, store: JsonProfileStore) -> None:
        store.create(Profile())
        store.create(Profile())

        assert store.delete_all() == 2
        assert store.list_all() == []

    def test_persists_across_instances(self, store: JsonProfileStore) -> None:
        store.create(Profile(host="persisted", plugin="obfs-local;obfs=http"))

        reopened = JsonProfileStore(store.storage_dir)

        profile = reopened.get(1)
        assert profile.host == "persisted"
        assert profile.plugin == "obfs-local;obfs=http"

    def test_index_file_layout(self, store: JsonProfileStore) -> None:
        store.create(Profile(remote_port=1080, dirty=True))

        data = json.loads(store.index_path.read_text())

        assert data["nextId"] == 2
        stored = data["profiles"]["1"]
        assert stored["remotePort"] == 1080
        assert "dirty" not in stored
        assert not store.index_path.with_suffix(".tmp").exists()

    def test_corrupt_index_treated_as_empty(self, store: JsonProfileStore, caplog: pytest.LogCaptureFixture) -> None:
        store.index_path.write_text("{not json")

        with caplog.at_level(logging.ERROR):
            assert store.list_all() == []

        assert "Failed to load profile index" in caplog.text
        assert store.index_path.read_text() == "{not json"

    def test_write_moves_corrupt_index_aside(self, store: JsonProfileStore) -> None:
        store.create(Profile(host="a.example"))
        original = store.index_path.read_text()
        store.index_path.write_text(original[: len(original) // 2])

        store.create(Profile(host="b.example"))

        backups = list(store.storage_dir.glob("index.json.corrupt-*"))
        assert len(backups) == 1
        assert backups[0].read_text() == original[: len(original) // 2]
        assert "a.example" in backups[0].read_text()
        assert [p.host for p in store.list_all()] == ["b.example"]
