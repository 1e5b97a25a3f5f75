"""Local per-item view counter consumed as the trend signal."""

from typing import Any

import orjson
import structlog

from feed_ranking.infrastructure.storage import KeyValueStorage

logger = structlog.get_logger()


def parse_views(raw: str | bytes | None) -> dict[int, int]:
    """Decode a ``{item_id: count}`` document, dropping anything malformed."""
    if raw is None:
        return {}
    try:
        document: Any = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.warning("View counts payload corrupt", error=str(e))
        return {}
    if not isinstance(document, dict):
        return {}

    views: dict[int, int] = {}
    for key, count in document.items():
        try:
            item_id = int(key)
        except ValueError:
            continue
        if isinstance(count, (int, float)) and not isinstance(count, bool) and count > 0:
            views[item_id] = int(count)
    return views


class ViewCountStore:
    """Persisted item id -> view count map."""

    def __init__(self, storage: KeyValueStorage, storage_key: str = "look.metrics.v1.views"):
        self.storage = storage
        self.storage_key = storage_key

    def load(self) -> dict[int, int]:
        return parse_views(self.storage.get(self.storage_key))

    def increment(self, item_id: int) -> int:
        views = self.load()
        views[item_id] = views.get(item_id, 0) + 1
        self.storage.set(self.storage_key, orjson.dumps({str(k): v for k, v in views.items()}).decode())
        return views[item_id]


def merge_views(current: dict[int, int], incoming: dict[int, int]) -> dict[int, int]:
    """Counters only grow, so the larger count per item wins."""
    merged = dict(current)
    for item_id, count in incoming.items():
        merged[item_id] = max(merged.get(item_id, 0), count)
    return merged
