"""Key-value storage backends with graceful degradation.

Every backend stores JSON text under string keys. A backend that cannot reach
its store behaves like an empty one: reads return ``None`` and writes are
dropped with a warning, so ranking keeps working on defaults.
"""

from typing import Protocol

import redis
import structlog

from feed_ranking.config import Settings, get_settings

logger = structlog.get_logger()

_redis_client: redis.Redis | None = None
_storage: "KeyValueStorage | None" = None


class KeyValueStorage(Protocol):
    """Minimal synchronous key-value interface used by the stores."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def health_check(self) -> bool: ...


class InMemoryStorage:
    """Process-local storage. Pass ``available=False`` to simulate blocked storage."""

    def __init__(self, initial: dict[str, str] | None = None, available: bool = True):
        self._data: dict[str, str] = dict(initial or {})
        self.available = available

    def get(self, key: str) -> str | None:
        if not self.available:
            return None
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not self.available:
            logger.warning("Storage unavailable, dropping write", key=key)
            return
        self._data[key] = value

    def delete(self, key: str) -> None:
        if not self.available:
            return
        self._data.pop(key, None)

    def health_check(self) -> bool:
        return self.available

    def keys(self) -> list[str]:
        return list(self._data)


class RedisStorage:
    """Redis-backed storage. No-ops if Redis is unavailable."""

    def __init__(self, client: redis.Redis | None):
        self.client = client

    def get(self, key: str) -> str | None:
        if not self.client:
            return None
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            logger.warning("Storage get failed", key=key, error=str(e))
        return None

    def set(self, key: str, value: str) -> None:
        if not self.client:
            logger.warning("Storage unavailable, dropping write", key=key)
            return
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            logger.warning("Storage set failed", key=key, error=str(e))

    def delete(self, key: str) -> None:
        if not self.client:
            return
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.warning("Storage delete failed", key=key, error=str(e))

    def health_check(self) -> bool:
        if not self.client:
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False


class NamespacedStorage:
    """Prefixes every key so several client profiles can share one backend."""

    def __init__(self, inner: KeyValueStorage, namespace: str):
        self.inner = inner
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> str | None:
        return self.inner.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.inner.set(self._key(key), value)

    def delete(self, key: str) -> None:
        self.inner.delete(self._key(key))

    def health_check(self) -> bool:
        return self.inner.health_check()


def get_redis_client(settings: Settings | None = None) -> redis.Redis | None:
    """Get or create the global Redis client."""
    global _redis_client
    if _redis_client is None:
        settings = settings or get_settings()
        try:
            _redis_client = redis.Redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
                retry_on_timeout=True,
            )
            _redis_client.ping()
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.warning("Redis unavailable, preferences will not persist", error=str(e))
            _redis_client = None
    return _redis_client


def get_storage() -> KeyValueStorage:
    """Get the process-wide storage backend selected by settings.

    A Redis backend is only cached once connected; until then each call
    retries the connection and hands out a no-op ``RedisStorage``.
    """
    global _storage
    if _storage is None:
        settings = get_settings()
        if settings.storage_backend == "redis":
            client = get_redis_client(settings)
            if client is None:
                return RedisStorage(None)
            _storage = RedisStorage(client)
        else:
            _storage = InMemoryStorage()
        logger.info("Storage backend ready", backend=settings.storage_backend)
    return _storage


def close_storage() -> None:
    """Close the Redis connection on shutdown."""
    global _redis_client, _storage
    if _redis_client:
        _redis_client.close()
        _redis_client = None
    _storage = None
