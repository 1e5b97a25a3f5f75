"""Multi-signal scoring of catalog items.

score = sum(facet_weight * facet_score) + trend_weight * trend + noise
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import TypeVar

import numpy as np

from feed_ranking.config import Settings
from feed_ranking.models import CatalogItem
from feed_ranking.services.facets import (
    eta_bucket,
    normalize_key,
    price_bucket,
    primary_category,
    sizes_of,
)
from feed_ranking.services.normalizer import FacetNormalizer
from feed_ranking.services.preference_store import Facet

_UINT32 = 0xFFFFFFFF

T = TypeVar("T")

# Column order of the feature matrix; trend is appended as the last column
SCORED_FACETS = (
    Facet.CATEGORY,
    Facet.STORE,
    Facet.GENDER,
    Facet.SIZE,
    Facet.PRICE_BUCKET,
    Facet.ETA_BUCKET,
    Facet.PRODUCT,
)


@dataclass(frozen=True)
class RankingWeights:
    """Linear blend weights. Category dominates, trend is the weakest signal."""

    category: float = 0.9
    store: float = 0.6
    gender: float = 0.4
    size: float = 0.3
    price: float = 0.3
    eta: float = 0.2
    product: float = 0.15
    trend: float = 0.1
    jitter: float = 0.05
    popularity_saturation: float = 100.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RankingWeights":
        return cls(
            category=settings.weight_category,
            store=settings.weight_store,
            gender=settings.weight_gender,
            size=settings.weight_size,
            price=settings.weight_price,
            eta=settings.weight_eta,
            product=settings.weight_product,
            trend=settings.weight_trend,
            jitter=settings.noise_jitter,
            popularity_saturation=settings.popularity_saturation,
        )

    def with_trend_boost(self, factor: float) -> "RankingWeights":
        return replace(self, trend=self.trend * factor)

    def as_vector(self) -> np.ndarray:
        return np.array(
            [
                self.category,
                self.store,
                self.gender,
                self.size,
                self.price,
                self.eta,
                self.product,
                self.trend,
            ],
            dtype=np.float64,
        )


def noise_for(item_id: int, seed: int) -> float:
    """Deterministic value in [0, 1] from a xorshift32 round over ``id ^ seed``."""
    x = (item_id ^ seed) & _UINT32
    x ^= (x << 13) & _UINT32
    x ^= x >> 17
    x ^= (x << 5) & _UINT32
    return x / _UINT32


def local_view_share(item_id: int, views: Mapping[int, int], max_views: int | None = None) -> float:
    if max_views is None:
        max_views = max(views.values(), default=0)
    if max_views <= 0:
        return 0.0
    return min(1.0, max(0, views.get(item_id, 0)) / max_views)


def remote_popularity_share(view_count: int | None, saturation: float) -> float:
    if not view_count or view_count <= 0:
        return 0.0
    return min(view_count, saturation) / saturation


def trend_score(
    item: CatalogItem,
    views: Mapping[int, int],
    saturation: float,
    max_views: int | None = None,
) -> float:
    return max(
        local_view_share(item.id, views, max_views),
        remote_popularity_share(item.view_count, saturation),
    )


def facet_scores(item: CatalogItem, normalizers: Mapping[Facet, FacetNormalizer]) -> list[float]:
    """Normalized preference per scored facet, 0 where the item lacks the attribute."""
    keys = {
        Facet.CATEGORY: primary_category(item),
        Facet.STORE: normalize_key(item.store_name) or None,
        Facet.GENDER: normalize_key(item.gender) or None,
        Facet.PRICE_BUCKET: price_bucket(item.price_tag),
        Facet.ETA_BUCKET: eta_bucket(item.eta_label),
        Facet.PRODUCT: item.id,
    }
    scores = []
    for facet in SCORED_FACETS:
        normalizer = normalizers.get(facet)
        if normalizer is None:
            scores.append(0.0)
        elif facet is Facet.SIZE:
            scores.append(normalizer.best_score(sizes_of(item)))
        else:
            scores.append(normalizer.score(keys[facet]))
    return scores


def score_items(
    items: Sequence[CatalogItem],
    normalizers: Mapping[Facet, FacetNormalizer],
    views: Mapping[int, int],
    seed: int,
    weights: RankingWeights,
) -> np.ndarray:
    """Score every item in one vectorized pass."""
    if not items:
        return np.zeros(0, dtype=np.float64)

    max_views = max(views.values(), default=0)
    features = np.array(
        [
            [
                *facet_scores(item, normalizers),
                trend_score(item, views, weights.popularity_saturation, max_views),
            ]
            for item in items
        ],
        dtype=np.float64,
    )
    noise = np.array([noise_for(item.id, seed) for item in items], dtype=np.float64)
    return features @ weights.as_vector() + noise * weights.jitter


def rank_by_score(items: Sequence[T], scores: np.ndarray) -> list[T]:
    """Items ordered by descending score; equal scores keep input order."""
    order = np.argsort(-scores, kind="stable")
    return [items[i] for i in order]
