"""Feed ranking pipeline.

One ``FeedRanker`` lives for one ranking session (one page load): it decays
preferences once, fixes the noise seed, and then ranks as many candidate
lists as the caller asks for.
"""

import random
import time
from collections.abc import Callable, Sequence

import structlog

from feed_ranking.config import Settings
from feed_ranking.infrastructure.events import ChangeHandler, ExternalChangeHub
from feed_ranking.infrastructure.storage import KeyValueStorage
from feed_ranking.models import CatalogItem
from feed_ranking.services.exploration import ExplorationPolicy, ExplorationSelector
from feed_ranking.services.normalizer import normalize_state
from feed_ranking.services.preference_store import (
    Clock,
    PreferenceState,
    PreferenceStore,
    combine_max,
    upgrade_legacy,
)
from feed_ranking.services.scoring import RankingWeights, rank_by_score, score_items
from feed_ranking.services.view_counts import ViewCountStore, merge_views, parse_views

logger = structlog.get_logger()

SEED_RANGE = 1_000_000_000


class FeedRanker:
    """Orders catalog items by learned affinity, trend and session noise."""

    def __init__(
        self,
        store: PreferenceStore,
        views: ViewCountStore | None = None,
        weights: RankingWeights | None = None,
        exploration: ExplorationSelector | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
    ):
        self.store = store
        self.views = views
        self.weights = weights or RankingWeights()
        self.rng = rng or random.Random()
        self.seed = seed if seed is not None else self.rng.randrange(SEED_RANGE)
        self.exploration = exploration or ExplorationSelector(rng=self.rng)

        self._changes = ExternalChangeHub()
        self._view_map: dict[int, int] = {}
        self._legacy_state = PreferenceState.empty()
        self._session_started = False

    @classmethod
    def from_settings(
        cls,
        storage: KeyValueStorage,
        settings: Settings,
        clock: Clock = time.time,
        rng: random.Random | None = None,
        seed: int | None = None,
    ) -> "FeedRanker":
        rng = rng or random.Random()
        store = PreferenceStore(
            storage,
            storage_key=settings.preferences_storage_key,
            legacy_storage_key=settings.legacy_preferences_storage_key,
            clock=clock,
            half_life_days=settings.decay_half_life_days,
        )
        return cls(
            store,
            views=ViewCountStore(storage, settings.views_storage_key),
            weights=RankingWeights.from_settings(settings),
            exploration=ExplorationSelector(ExplorationPolicy.from_settings(settings), rng=rng),
            rng=rng,
            seed=seed,
        )

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def begin_session(self, half_life_days: float | None = None) -> PreferenceState:
        """Decay preferences and load the session's inputs. Runs once per session."""
        snapshot = self.store.decay_all(half_life_days)
        self._legacy_state = upgrade_legacy(self.store.load_legacy(), self.store.clock())
        self._view_map = self.views.load() if self.views else {}
        self._session_started = True
        logger.info(
            "Ranking session started",
            seed=self.seed,
            has_preferences=not snapshot.is_empty(),
            has_legacy=not self._legacy_state.is_empty(),
            tracked_views=len(self._view_map),
        )
        return snapshot

    def get_preferences(self) -> PreferenceState:
        if not self._session_started:
            self.begin_session()
        return self.store.get_preferences()

    @property
    def view_counts(self) -> dict[int, int]:
        return dict(self._view_map)

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    def rank_with_scores(
        self, candidates: Sequence[CatalogItem], explore: bool | None = None
    ) -> list[tuple[CatalogItem, float]]:
        """Ranked ``(item, score)`` pairs. ``explore`` forces the coin flip when given."""
        if not self._session_started:
            self.begin_session()
        if not candidates:
            return []

        exploring = self.exploration.should_explore() if explore is None else explore
        weights = self.weights
        if exploring:
            weights = weights.with_trend_boost(self.exploration.policy.trend_boost)

        state = combine_max(self.store.get_preferences(), self._legacy_state)
        scores = score_items(candidates, normalize_state(state), self._view_map, self.seed, weights)
        ranked = rank_by_score(list(zip(candidates, scores.tolist())), scores)

        if exploring:
            ranked = self.exploration.reorder(ranked)

        logger.debug("Ranked feed", candidates=len(candidates), exploring=exploring)
        return ranked

    def rank(self, candidates: Sequence[CatalogItem], explore: bool | None = None) -> list[CatalogItem]:
        return [item for item, _ in self.rank_with_scores(candidates, explore)]

    # ------------------------------------------------------------------
    # Cross-client changes
    # ------------------------------------------------------------------

    def on_external_change(self, handler: ChangeHandler) -> Callable[[], None]:
        """Subscribe to storage changes made by other clients."""
        return self._changes.subscribe(handler)

    def notify_external_change(self, key: str, new_value: str | None) -> None:
        """Entry point for transport adapters; merges view counts, then fans out."""
        if self.views and key == self.views.storage_key and new_value is not None:
            self._view_map = merge_views(self._view_map, parse_views(new_value))
        self._changes.publish(key, new_value)

    def record_view(self, item_id: int) -> int:
        """Count a view locally and persist it when a view store is attached."""
        count = self.views.increment(item_id) if self.views else self._view_map.get(item_id, 0) + 1
        self._view_map[item_id] = max(self._view_map.get(item_id, 0), count)
        return self._view_map[item_id]
