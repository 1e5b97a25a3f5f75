"""Epsilon-greedy exploration over the head of a ranked feed."""

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

import structlog

from feed_ranking.config import Settings
from feed_ranking.constants import EXPLORATION_FIRST_SLOT

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class ExplorationPolicy:
    epsilon: float = 0.08
    trend_boost: float = 2.2
    max_injections: int = 6
    window: int = 24
    start_offset: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExplorationPolicy":
        return cls(
            epsilon=settings.exploration_epsilon,
            trend_boost=settings.exploration_trend_boost,
            max_injections=settings.exploration_max_injections,
            window=settings.exploration_window,
            start_offset=settings.exploration_start_offset,
        )


class ExplorationSelector:
    """Decides whether a ranking pass explores and reshuffles its head if so.

    Only items from ``[start_offset, window)`` are ever moved, and they only
    move forward, so anything ranked past the window stays past it.
    """

    def __init__(self, policy: ExplorationPolicy | None = None, rng: random.Random | None = None):
        self.policy = policy or ExplorationPolicy()
        self.rng = rng or random.Random()

    def should_explore(self) -> bool:
        return self.rng.random() < self.policy.epsilon

    def injection_count(self, length: int) -> int:
        pool = max(0, min(self.policy.window, length) - self.policy.start_offset)
        return min(self.policy.max_injections, length // 8, pool)

    def reorder(self, ranked: Sequence[T]) -> list[T]:
        """Splice a few early-middle items into alternating head slots."""
        result = list(ranked)
        count = self.injection_count(len(result))
        if count <= 0:
            return result

        window_end = min(self.policy.window, len(result))
        picked = sorted(self.rng.sample(range(self.policy.start_offset, window_end), count))
        chosen = [result[i] for i in picked]
        for i in reversed(picked):
            del result[i]

        # Targets strictly increase, so each item lands exactly on its slot
        for n, (origin, item) in enumerate(zip(picked, chosen)):
            result.insert(min(EXPLORATION_FIRST_SLOT + 2 * n, origin), item)

        logger.debug("Exploration reordered feed head", moved_from=picked)
        return result
