"""Half-life decay of preference statistics.

A persisted weight is the value of the statistic at ``last_updated``. Decay
is evaluated from that anchor, so evaluating it repeatedly at different times
never compounds: decaying to ``t1`` and then to ``t1 + t2`` gives the same
weight as decaying straight to ``t1 + t2``.
"""

from dataclasses import replace
from typing import TYPE_CHECKING

from feed_ranking.constants import SECONDS_PER_DAY

if TYPE_CHECKING:
    from feed_ranking.services.preference_store import KeyStat, PreferenceState


def decay_factor(elapsed_days: float, half_life_days: float) -> float:
    """Multiplier ``2 ** (-elapsed / half_life)``; negative elapsed counts as zero."""
    if half_life_days <= 0:
        raise ValueError("half_life_days must be positive")
    return 2.0 ** (-max(0.0, elapsed_days) / half_life_days)


def decayed_weight(stat: "KeyStat", now: float, half_life_days: float) -> float:
    elapsed_days = (now - stat.last_updated) / SECONDS_PER_DAY
    return stat.weight * decay_factor(elapsed_days, half_life_days)


def decay_stat(stat: "KeyStat", now: float, half_life_days: float) -> "KeyStat":
    """Decayed copy of ``stat``; ``last_updated`` is left untouched."""
    return replace(stat, weight=decayed_weight(stat, now, half_life_days))


def decay_state(
    state: "PreferenceState", now: float, half_life_days: float
) -> "PreferenceState":
    """Decay every statistic of every facet as of ``now``."""
    return state.map_stats(lambda stat: decay_stat(stat, now, half_life_days))
