"""Unit tests for storage backends."""

import pytest
import redis

from feed_ranking.config import Settings
from feed_ranking.infrastructure import storage as storage_module
from feed_ranking.infrastructure.events import ExternalChangeHub
from feed_ranking.infrastructure.storage import InMemoryStorage, NamespacedStorage, RedisStorage, get_storage


class TestRedisStorageGracefulDegradation:
    """RedisStorage should no-op safely when Redis is unavailable."""

    @pytest.fixture
    def storage(self) -> RedisStorage:
        return RedisStorage(None)

    def test_get_returns_none(self, storage: RedisStorage) -> None:
        assert storage.get("any-key") is None

    def test_set_is_noop(self, storage: RedisStorage) -> None:
        storage.set("key", "{}")  # should not raise

    def test_delete_is_noop(self, storage: RedisStorage) -> None:
        storage.delete("key")  # should not raise

    def test_health_check_returns_false(self, storage: RedisStorage) -> None:
        assert storage.health_check() is False


class BrokenClient:
    def get(self, key):
        raise redis.ConnectionError("down")

    def set(self, key, value):
        raise redis.ConnectionError("down")

    def delete(self, key):
        raise redis.ConnectionError("down")

    def ping(self):
        raise redis.ConnectionError("down")


class TestRedisStorageErrors:
    def test_errors_are_absorbed(self) -> None:
        storage = RedisStorage(BrokenClient())
        assert storage.get("k") is None
        storage.set("k", "v")
        storage.delete("k")
        assert storage.health_check() is False


class HealthyClient(BrokenClient):
    def ping(self):
        return True


class TestGetStorage:
    """A Redis outage at startup must not disable persistence for good."""

    @pytest.fixture(autouse=True)
    def redis_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(storage_module, "_storage", None)
        monkeypatch.setattr(storage_module, "get_settings", lambda: Settings(storage_backend="redis"))

    def test_reconnects_after_outage(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(storage_module, "get_redis_client", lambda settings=None: None)
        degraded = get_storage()
        assert isinstance(degraded, RedisStorage)
        assert degraded.client is None

        client = HealthyClient()
        monkeypatch.setattr(storage_module, "get_redis_client", lambda settings=None: client)
        recovered = get_storage()
        assert recovered.client is client
        assert get_storage() is recovered


class TestInMemoryStorage:
    def test_round_trip_and_delete(self) -> None:
        storage = InMemoryStorage()
        storage.set("k", "v")
        assert storage.get("k") == "v"
        storage.delete("k")
        assert storage.get("k") is None

    def test_unavailable_drops_everything(self) -> None:
        storage = InMemoryStorage({"k": "v"}, available=False)
        assert storage.get("k") is None
        storage.set("x", "y")
        assert storage.health_check() is False
        storage.available = True
        assert storage.get("x") is None


class TestNamespacedStorage:
    def test_profiles_are_isolated(self) -> None:
        backend = InMemoryStorage()
        alice = NamespacedStorage(backend, "profile:a")
        bob = NamespacedStorage(backend, "profile:b")

        alice.set("look.prefs.v2", "A")
        assert bob.get("look.prefs.v2") is None
        assert backend.get("profile:a:look.prefs.v2") == "A"


class TestExternalChangeHub:
    def test_failing_handler_does_not_block_others(self) -> None:
        hub = ExternalChangeHub()
        seen = []

        def broken(key, value):
            raise RuntimeError("boom")

        hub.subscribe(broken)
        hub.subscribe(lambda key, value: seen.append(key))
        hub.publish("k", "v")
        assert seen == ["k"]
        assert len(hub) == 2
