"""Per-facet normalization of preference weights into [0, 1]."""

from collections.abc import Iterable, Mapping

from feed_ranking.services.preference_store import Facet, FacetKey, PreferenceState


class FacetNormalizer:
    """Scores keys relative to the facet's largest weight.

    The maximum is floored at 1 so a facet with no observations (or only tiny,
    decayed ones) scores every key at or near zero instead of inflating a
    faint signal to 1.0.
    """

    def __init__(self, weights: Mapping[FacetKey, float]):
        self.weights = dict(weights)
        self.max_weight = max(1.0, max(self.weights.values(), default=0.0))

    def score(self, key: FacetKey | None) -> float:
        if key is None:
            return 0.0
        weight = self.weights.get(key, 0.0)
        return min(1.0, max(0.0, weight / self.max_weight))

    def best_score(self, keys: Iterable[FacetKey]) -> float:
        return max((self.score(key) for key in keys), default=0.0)


def normalize_state(state: PreferenceState) -> dict[Facet, FacetNormalizer]:
    return {facet: FacetNormalizer(state.weights(facet)) for facet in Facet}
