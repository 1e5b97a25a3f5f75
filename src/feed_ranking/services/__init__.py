"""Business logic services."""

from feed_ranking.services.exploration import ExplorationPolicy, ExplorationSelector
from feed_ranking.services.interactions import InteractionTracker
from feed_ranking.services.normalizer import FacetNormalizer
from feed_ranking.services.preference_store import (
    Facet,
    KeyStat,
    LegacyPreferences,
    PreferenceState,
    PreferenceStore,
)
from feed_ranking.services.ranker import FeedRanker
from feed_ranking.services.scoring import RankingWeights
from feed_ranking.services.view_counts import ViewCountStore

__all__ = [
    "ExplorationPolicy",
    "ExplorationSelector",
    "Facet",
    "FacetNormalizer",
    "FeedRanker",
    "InteractionTracker",
    "KeyStat",
    "LegacyPreferences",
    "PreferenceState",
    "PreferenceStore",
    "RankingWeights",
    "ViewCountStore",
]
