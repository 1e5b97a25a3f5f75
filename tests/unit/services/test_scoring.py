"""Unit tests for the scoring function."""

import numpy as np
import pytest

from feed_ranking.config import Settings
from feed_ranking.models import CatalogItem
from feed_ranking.services.normalizer import FacetNormalizer
from feed_ranking.services.preference_store import Facet
from feed_ranking.services.scoring import (
    RankingWeights,
    facet_scores,
    local_view_share,
    noise_for,
    rank_by_score,
    remote_popularity_share,
    score_items,
    trend_score,
)


class TestNoise:
    def test_known_xorshift_value(self) -> None:
        assert noise_for(1, 0) == pytest.approx(270369 / 0xFFFFFFFF)

    def test_deterministic_for_seed(self) -> None:
        assert noise_for(42, 987654) == noise_for(42, 987654)

    def test_differs_across_seeds(self) -> None:
        values = {noise_for(42, seed) for seed in range(1, 50)}
        assert len(values) > 40

    def test_in_unit_interval(self) -> None:
        for item_id in range(-50, 500, 7):
            assert 0.0 <= noise_for(item_id, 123456789) <= 1.0


class TestTrend:
    def test_local_view_share(self) -> None:
        views = {1: 10, 2: 5}
        assert local_view_share(1, views) == 1.0
        assert local_view_share(2, views) == pytest.approx(0.5)
        assert local_view_share(3, views) == 0.0

    def test_no_views_at_all(self) -> None:
        assert local_view_share(1, {}) == 0.0

    def test_remote_popularity_saturates(self) -> None:
        assert remote_popularity_share(50, 100.0) == pytest.approx(0.5)
        assert remote_popularity_share(5000, 100.0) == 1.0
        assert remote_popularity_share(None, 100.0) == 0.0

    def test_trend_takes_larger_signal(self) -> None:
        item = CatalogItem(id=2, view_count=80)
        assert trend_score(item, {1: 10, 2: 5}, 100.0) == pytest.approx(0.8)


class TestFacetScores:
    def test_malformed_item_scores_zero(self) -> None:
        normalizers = {facet: FacetNormalizer({"shoes": 3.0, "mid": 2.0}) for facet in Facet}
        scores = facet_scores(CatalogItem(id=1), normalizers)
        assert scores == [0.0] * 7

    def test_size_uses_best_matching_size(self) -> None:
        normalizers = {Facet.SIZE: FacetNormalizer({"m": 2.0, "g": 4.0})}
        scores = facet_scores(CatalogItem(id=1, sizes="P,M"), normalizers)
        assert scores[3] == pytest.approx(0.5)

    def test_product_facet_uses_item_id(self) -> None:
        normalizers = {Facet.PRODUCT: FacetNormalizer({7: 2.0})}
        assert facet_scores(CatalogItem(id=7), normalizers)[6] == 1.0


class TestScoreItems:
    def test_learned_preference_beats_raw_popularity(self) -> None:
        popular = CatalogItem(id=1, category="hats", store_name="Loja A", view_count=100)
        liked = CatalogItem(id=2, category="shoes", store_name="Loja B", view_count=0)
        normalizers = {
            Facet.CATEGORY: FacetNormalizer({"shoes": 6.0}),
            Facet.STORE: FacetNormalizer({"loja b": 4.0}),
        }

        scores = score_items([popular, liked], normalizers, {}, seed=99, weights=RankingWeights())
        assert scores[1] > scores[0]
        assert rank_by_score([popular, liked], scores)[0] is liked

    def test_score_is_weighted_sum_plus_noise(self) -> None:
        item = CatalogItem(id=5, category="shoes")
        weights = RankingWeights(jitter=0.0)
        scores = score_items([item], {Facet.CATEGORY: FacetNormalizer({"shoes": 2.0})}, {}, 1, weights)
        assert scores[0] == pytest.approx(0.9)

    def test_empty(self) -> None:
        assert score_items([], {}, {}, 1, RankingWeights()).shape == (0,)

    def test_trend_boost(self) -> None:
        assert RankingWeights().with_trend_boost(2.2).trend == pytest.approx(0.22)

    def test_default_weight_ordering(self) -> None:
        w = RankingWeights()
        assert w.category > w.store > w.gender > w.price > w.eta > w.product > w.trend

    def test_from_settings(self) -> None:
        weights = RankingWeights.from_settings(Settings(weight_category=2.0, noise_jitter=0.0))
        assert weights.category == 2.0
        assert weights.jitter == 0.0


def test_rank_by_score_is_stable_on_ties() -> None:
    assert rank_by_score(["a", "b", "c"], np.array([1.0, 2.0, 1.0])) == ["b", "a", "c"]
