"""
Shared pytest fixtures for the shadowlink test suite.

Provides fixtures for:
- Temporary storage directories
- Profile stores and services with isolated storage
- Sample profiles
"""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from shadowlink.models.profiles import Profile
from shadowlink.services.profile_service import ProfileService
from shadowlink.storage.profile_store import JsonProfileStore

EXAMPLE_LINK = "ss://YWVzLTI1Ni1jZmI6dTFyUldUc3NOdjBw@example.shadowsocks.org:8388#MyServer"
LEGACY_LINK = "ss://YWVzLTI1Ni1jZmI6dTFyUldUc3NOdjBwQGV4YW1wbGUuc2hhZG93c29ja3Mub3JnOjgzODg=#Legacy"


@pytest.fixture
def temp_storage_dir() -> Generator[Path, None, None]:
    """Create temporary storage directory for tests.

    Automatically cleaned up after test completes.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_storage_env(temp_storage_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point SHADOWLINK_HOME at a temp directory.

    This ensures tests use isolated storage and don't interfere with
    real data or other tests.

    Returns:
        Path to temporary storage directory
    """
    monkeypatch.setenv("SHADOWLINK_HOME", str(temp_storage_dir))
    for name in ("SHADOWLINK_CONFIG_DIR", "SHADOWLINK_STATE_DIR", "SHADOWLINK_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    return temp_storage_dir


@pytest.fixture
def store(temp_storage_dir: Path) -> JsonProfileStore:
    """Create JsonProfileStore with isolated storage."""
    return JsonProfileStore(temp_storage_dir / "profiles")


@pytest.fixture
def service(store: JsonProfileStore) -> ProfileService:
    """Create ProfileService on the isolated store."""
    return ProfileService(store)


@pytest.fixture
def sample_profile() -> Profile:
    """A fully populated profile that survives both codecs."""
    return Profile(
        name="Tokyo 1",
        host="jp1.example.net",
        remote_port=443,
        password="s3cr:et@pass",
        method="chacha20-ietf-poly1305",
        route="bypass-lan-china",
        remote_dns="1.1.1.1",
        proxy_apps=True,
        bypass=True,
        udpdns=True,
        ipv6=True,
        metered=True,
        individual="com.example.one\ncom.example.two",
        plugin="obfs-local;obfs=http;obfs-host=www.example.com",
    )
