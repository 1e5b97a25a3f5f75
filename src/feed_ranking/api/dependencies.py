"""Shared FastAPI dependencies."""

from feed_ranking.infrastructure.storage import KeyValueStorage, NamespacedStorage


def profile_storage(storage: KeyValueStorage, profile_id: str) -> KeyValueStorage:
    """Storage view holding one client profile's preferences and view counts."""
    return NamespacedStorage(storage, f"profile:{profile_id}")
