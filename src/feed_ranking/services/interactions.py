"""Translate user interactions into preference bumps."""

from typing import Any

import structlog

from feed_ranking.constants import INTERACTION_BUMPS
from feed_ranking.models import CatalogItem
from feed_ranking.services.facets import eta_bucket, price_bucket, primary_category
from feed_ranking.services.preference_store import Facet, KeyStat
from feed_ranking.services.ranker import FeedRanker

logger = structlog.get_logger()


class InteractionTracker:
    """Service for recording interactions against a ranking session."""

    def __init__(self, ranker: FeedRanker):
        self.ranker = ranker
        self.store = ranker.store

    def product_opened(self, item: CatalogItem) -> dict[str, Any]:
        """A product detail was opened: the strongest implicit signal."""
        increments = INTERACTION_BUMPS["product_open"]
        keys = {
            Facet.CATEGORY: primary_category(item),
            Facet.STORE: item.store_name,
            Facet.GENDER: item.gender,
            Facet.PRICE_BUCKET: price_bucket(item.price_tag),
            Facet.ETA_BUCKET: eta_bucket(item.eta_label),
            Facet.PRODUCT: item.id,
        }

        bumped: dict[str, KeyStat] = {}
        for facet, key in keys.items():
            stat = self.store.bump(facet, key, increments[facet.value])
            if stat is not None:
                bumped[facet.value] = stat
        views = self.ranker.record_view(item.id)

        logger.info("Recorded product open", product_id=item.id, facets=sorted(bumped), views=views)
        return {"bumped": bumped, "views": views}

    def filter_applied(self, facet: Facet, value: str) -> KeyStat | None:
        """A filter chip was selected for ``facet``."""
        event = {
            Facet.CATEGORY: "filter_category",
            Facet.STORE: "filter_store",
            Facet.GENDER: "filter_gender",
            Facet.SIZE: "filter_size",
        }.get(facet)
        if event is None:
            raise ValueError(f"facet {facet.value} has no filter interaction")

        stat = self.store.bump(facet, value, INTERACTION_BUMPS[event][facet.value])
        logger.debug("Recorded filter", facet=facet.value, applied=stat is not None)
        return stat
