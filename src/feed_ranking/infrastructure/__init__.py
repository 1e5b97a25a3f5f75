"""Infrastructure adapters (storage, change notifications)."""

from feed_ranking.infrastructure.events import ExternalChangeHub
from feed_ranking.infrastructure.storage import (
    InMemoryStorage,
    KeyValueStorage,
    NamespacedStorage,
    RedisStorage,
    get_storage,
)

__all__ = [
    "ExternalChangeHub",
    "InMemoryStorage",
    "KeyValueStorage",
    "NamespacedStorage",
    "RedisStorage",
    "get_storage",
]
