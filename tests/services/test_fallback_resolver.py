"""Tests for UDP fallback resolution."""

import json

import pytest

from shadowlink.models.profiles import Profile
from shadowlink.parsing.json_config import ParseResult
from shadowlink.parsing.json_config import decode_json
from shadowlink.services.fallback_resolver import FallbackResolver
from shadowlink.services.fallback_resolver import is_same_endpoint
from shadowlink.services.profile_service import ProfileService
from shadowlink.storage.profile_store import JsonProfileStore


def server(host: str, **extra) -> dict:
    return {"server": host, "server_port": 8388, "password": "pw", "method": "aes-256-gcm", **extra}


@pytest.fixture
def resolver(store: JsonProfileStore) -> FallbackResolver:
    return FallbackResolver(store)


@pytest.fixture
def created(service: ProfileService) -> list[Profile]:
    """Records every profile passed to the create callback."""
    return []


@pytest.fixture
def create(service: ProfileService, created: list[Profile]):
    def create_profile(profile: Profile) -> Profile:
        created.append(profile)
        return service.create_profile(profile)

    return create_profile


@pytest.mark.unit
class TestIsSameEndpoint:
    def test_full_field_equality(self) -> None:
        fallback = Profile(host="h", remote_port=1, password="p", method="m")

        assert is_same_endpoint(Profile(id=5, name="other", host="h", remote_port=1, password="p", method="m"), fallback)
        assert not is_same_endpoint(Profile(host="h", remote_port=2, password="p", method="m"), fallback)
        assert not is_same_endpoint(Profile(host="h", remote_port=1, password="x", method="m"), fallback)
        assert not is_same_endpoint(Profile(host="h", remote_port=1, password="p", method="x"), fallback)

    def test_candidate_with_plugin_never_matches(self) -> None:
        fallback = Profile(host="h", remote_port=1, password="p", method="m")
        candidate = Profile(host="h", remote_port=1, password="p", method="m", plugin="obfs-local")

        assert not is_same_endpoint(candidate, fallback)
        candidate.plugin = ""
        assert is_same_endpoint(candidate, fallback)


@pytest.mark.unit
class TestFallbackResolver:
    def test_shared_fallback_created_once(self, resolver, create, created, store) -> None:
        document = [server("a", udp_fallback=server("fb")), server("b", udp_fallback=server("fb"))]

        persisted = resolver.import_result(decode_json(json.dumps(document)), create)

        assert [p.host for p in created] == ["a", "b", "fb"]
        fallback_ids = {p.udp_fallback for p in persisted}
        assert len(fallback_ids) == 1
        fallback = store.get(fallback_ids.pop())
        assert fallback.host == "fb"
        assert len(store.list_all()) == 3

    def test_top_level_persisted_before_fallbacks(self, resolver, create, created) -> None:
        document = [server("a", udp_fallback=server("fb-a")), server("b")]

        resolver.import_result(decode_json(json.dumps(document)), create)

        assert [p.host for p in created] == ["a", "b", "fb-a"]

    def test_reuses_existing_stored_profile(self, resolver, create, created, service, store) -> None:
        existing = service.create_profile(Profile(host="fb", remote_port=8388, password="pw", method="aes-256-gcm"))

        persisted = resolver.import_result(decode_json(json.dumps(server("a", udp_fallback=server("fb")))), create)

        assert [p.host for p in created] == ["a"]
        assert persisted[0].udp_fallback == existing.id
        assert store.get(persisted[0].id).udp_fallback == existing.id

    def test_reuses_profile_from_same_batch(self, resolver, create, created) -> None:
        document = [server("a", udp_fallback=server("b")), server("b")]

        persisted = resolver.import_result(decode_json(json.dumps(document)), create)

        assert [p.host for p in created] == ["a", "b"]
        assert persisted[0].udp_fallback == persisted[1].id

    def test_existing_profile_with_plugin_not_reused(self, resolver, create, created, service) -> None:
        service.create_profile(
            Profile(host="fb", remote_port=8388, password="pw", method="aes-256-gcm", plugin="obfs-local;obfs=http")
        )

        persisted = resolver.import_result(decode_json(json.dumps(server("a", udp_fallback=server("fb")))), create)

        assert [p.host for p in created] == ["a", "fb"]
        assert persisted[0].udp_fallback == created[1].id

    def test_update_persisted(self, resolver, create, store) -> None:
        persisted = resolver.import_result(decode_json(json.dumps(server("a", udp_fallback=server("fb")))), create)

        stored = store.get(persisted[0].id)
        assert stored.udp_fallback is not None
        assert store.get(stored.udp_fallback).host == "fb"

    def test_without_fallbacks(self, resolver, create, store) -> None:
        persisted = resolver.import_result(ParseResult(profiles=[Profile(host="a"), Profile(host="b")]), create)

        assert [p.id for p in persisted] == [1, 2]
        assert all(p.udp_fallback is None for p in store.list_all())

    def test_fallback_with_plugin_never_stored(self, resolver, create, created, store) -> None:
        result = ParseResult(
            profiles=[Profile(host="a")],
            fallbacks={0: Profile(host="fb", plugin="obfs-local;obfs=http")},
        )

        persisted = resolver.import_result(result, create)

        assert [p.host for p in created] == ["a"]
        assert persisted[0].udp_fallback is None
        assert store.get(persisted[0].id).udp_fallback is None
