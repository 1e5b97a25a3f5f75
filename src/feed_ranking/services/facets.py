"""Facet key derivation for catalog items."""

import math
import re

from feed_ranking.constants import ETA_TIERS, ETA_TOP_TIER, PRICE_TIERS, PRICE_TOP_TIER
from feed_ranking.models import CatalogItem

_ETA_PATTERN = re.compile(
    r"(?P<value>\d+(?:[.,]\d+)?)\s*(?P<unit>min|m\b|h|d|sem|week|w\b)",
    re.IGNORECASE,
)
_UNIT_MINUTES = {"min": 1, "m": 1, "h": 60, "d": 1440, "sem": 10080, "week": 10080, "w": 10080}
# A number directly followed by a word: a unit we do not know
_UNKNOWN_UNIT = re.compile(r"\d\s*[^\W\d_]", re.UNICODE)


def normalize_key(key: object) -> str:
    """Lower-case and trim a facet key."""
    return "" if key is None else str(key).strip().lower()


def categories_of(item: CatalogItem) -> list[str]:
    """Union of ``category`` and ``categories``, lower-cased, deduplicated, in order."""
    merged = [item.category, *(item.categories or [])]
    seen: dict[str, None] = {}
    for raw in merged:
        key = normalize_key(raw)
        if key:
            seen.setdefault(key, None)
    return list(seen)


def primary_category(item: CatalogItem) -> str | None:
    cats = categories_of(item)
    return cats[0] if cats else None


def sizes_of(item: CatalogItem) -> list[str]:
    raw = ",".join(item.sizes) if isinstance(item.sizes, list) else (item.sizes or "")
    return list(dict.fromkeys(s for s in (normalize_key(p) for p in raw.split(",")) if s))


def price_bucket(price: float | None) -> str | None:
    """Discretize a price into an ordered tier label, ``None`` when unknown."""
    if price is None or not math.isfinite(price) or price < 0:
        return None
    for upper, label in PRICE_TIERS:
        if price < upper:
            return label
    return PRICE_TOP_TIER


def eta_minutes(label: str | None) -> float | None:
    """Parse labels such as ``"até 1h"``, ``"45 min"`` or ``"2 dias"`` into minutes.

    When a label carries a range (``"30-45 min"``) the largest number wins.
    """
    if not label:
        return None
    best = None
    for match in _ETA_PATTERN.finditer(label):
        value = float(match.group("value").replace(",", "."))
        unit = match.group("unit").lower()
        minutes = value * _UNIT_MINUTES[unit]
        best = minutes if best is None else max(best, minutes)
    if best is None:
        numbers = re.findall(r"\d+", label)
        if not numbers or _UNKNOWN_UNIT.search(label):
            return None
        # Unit-less numbers are minutes
        best = float(max(int(n) for n in numbers))
    return best


def eta_bucket(label: str | None) -> str | None:
    minutes = eta_minutes(label)
    if minutes is None:
        return None
    for upper, tier in ETA_TIERS:
        if minutes <= upper:
            return tier
    return ETA_TOP_TIER
