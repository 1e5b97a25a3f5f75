"""Persisted per-facet preference statistics.

Two document shapes can be found in storage:

- the versioned document (``{"version": 2, "cat": {key: {"w", "t"}}, ...}``)
  written by this module, and
- the legacy flat counters (``{"cat": {key: count}, "store": {...}}``) written
  by older clients, which is only ever read.

``parse_preferences_document`` returns one of the two as a tagged union and
``upgrade_legacy`` is the only conversion between them.
"""

import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import orjson
import structlog

from feed_ranking.constants import FACET_BUMP_DEFAULTS, PREFERENCES_VERSION
from feed_ranking.infrastructure.storage import KeyValueStorage
from feed_ranking.services.decay import decay_state, decayed_weight
from feed_ranking.services.facets import normalize_key

logger = structlog.get_logger()

FacetKey = str | int
Clock = Callable[[], float]


class CorruptPayloadError(ValueError):
    """Persisted preferences could not be interpreted."""


class Facet(str, Enum):
    """Preference axes. Values are the keys used in the persisted document."""

    CATEGORY = "cat"
    STORE = "store"
    GENDER = "gender"
    SIZE = "size"
    PRICE_BUCKET = "price"
    ETA_BUCKET = "eta"
    PRODUCT = "product"


@dataclass(frozen=True)
class KeyStat:
    """Learned affinity for one key: weight as of ``last_updated`` (epoch seconds)."""

    weight: float
    last_updated: float


def _empty_facets() -> dict[Facet, dict[FacetKey, KeyStat]]:
    return {facet: {} for facet in Facet}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _product_key(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


@dataclass
class PreferenceState:
    """All seven facets, each mapping a normalized key to its statistic."""

    facets: dict[Facet, dict[FacetKey, KeyStat]] = field(default_factory=_empty_facets)

    @classmethod
    def empty(cls) -> "PreferenceState":
        return cls()

    def facet(self, facet: Facet) -> dict[FacetKey, KeyStat]:
        return self.facets.setdefault(facet, {})

    def get(self, facet: Facet, key: FacetKey) -> KeyStat | None:
        return self.facets.get(facet, {}).get(key)

    def weights(self, facet: Facet) -> dict[FacetKey, float]:
        return {key: stat.weight for key, stat in self.facet(facet).items()}

    def is_empty(self) -> bool:
        return not any(self.facets.values())

    def copy(self) -> "PreferenceState":
        return PreferenceState({facet: dict(stats) for facet, stats in self.facets.items()})

    def map_stats(self, fn: Callable[[KeyStat], KeyStat]) -> "PreferenceState":
        return PreferenceState(
            {facet: {key: fn(stat) for key, stat in stats.items()} for facet, stats in self.facets.items()}
        )

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {"version": PREFERENCES_VERSION}
        for facet in Facet:
            document[facet.value] = {
                str(key): {"w": stat.weight, "t": stat.last_updated}
                for key, stat in self.facet(facet).items()
            }
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "PreferenceState":
        if document.get("version") != PREFERENCES_VERSION:
            raise CorruptPayloadError(f"unsupported version {document.get('version')!r}")

        state = cls()
        for facet in Facet:
            entries = document.get(facet.value, {})
            if not isinstance(entries, dict):
                raise CorruptPayloadError(f"facet {facet.value} is not a mapping")
            for raw_key, entry in entries.items():
                if not isinstance(entry, dict) or not _is_number(entry.get("w")) or not _is_number(entry.get("t")):
                    raise CorruptPayloadError(f"bad entry in facet {facet.value}")
                if entry["w"] < 0:
                    raise CorruptPayloadError(f"negative weight in facet {facet.value}")
                key = _product_key(raw_key) if facet is Facet.PRODUCT else raw_key
                if key is None:
                    raise CorruptPayloadError(f"bad product key {raw_key!r}")
                state.facet(facet)[key] = KeyStat(weight=float(entry["w"]), last_updated=float(entry["t"]))
        return state


@dataclass(frozen=True)
class LegacyPreferences:
    """Pre-migration flat counters: facet -> key -> count."""

    counts: dict[Facet, dict[FacetKey, float]] = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "LegacyPreferences":
        counts: dict[Facet, dict[FacetKey, float]] = {}
        for facet in Facet:
            entries = document.get(facet.value)
            if entries is None:
                continue
            if not isinstance(entries, dict):
                raise CorruptPayloadError(f"legacy facet {facet.value} is not a mapping")
            parsed: dict[FacetKey, float] = {}
            for raw_key, count in entries.items():
                if not _is_number(count):
                    raise CorruptPayloadError(f"bad legacy count in facet {facet.value}")
                key = _product_key(raw_key) if facet is Facet.PRODUCT else normalize_key(raw_key)
                if key is None or key == "":
                    continue
                parsed[key] = max(parsed.get(key, 0.0), max(0.0, float(count)))
            counts[facet] = parsed
        return cls(counts)


StoredPreferences = PreferenceState | LegacyPreferences


def parse_preferences_document(raw: str | bytes) -> StoredPreferences:
    """Decode a stored payload into whichever shape it holds."""
    try:
        document = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise CorruptPayloadError(str(e)) from e
    if not isinstance(document, dict):
        raise CorruptPayloadError("payload is not an object")
    if "version" in document:
        return PreferenceState.from_document(document)
    return LegacyPreferences.from_document(document)


def upgrade_legacy(legacy: LegacyPreferences, now: float) -> PreferenceState:
    """Convert legacy counters into statistics stamped at ``now``."""
    state = PreferenceState.empty()
    for facet, counts in legacy.counts.items():
        for key, count in counts.items():
            state.facet(facet)[key] = KeyStat(weight=count, last_updated=now)
    return state


def combine_max(primary: PreferenceState, fallback: PreferenceState) -> PreferenceState:
    """Per key, keep whichever statistic carries the greater weight."""
    combined = primary.copy()
    for facet, stats in fallback.facets.items():
        target = combined.facet(facet)
        for key, stat in stats.items():
            current = target.get(key)
            if current is None or stat.weight > current.weight:
                target[key] = stat
    return combined


class PreferenceStore:
    """Owner of the persisted preference state and its only write path."""

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str = "look.prefs.v2",
        legacy_storage_key: str = "look.prefs.v1",
        clock: Clock = time.time,
        half_life_days: float = 14.0,
    ):
        if half_life_days <= 0:
            raise ValueError("half_life_days must be positive")
        self.storage = storage
        self.storage_key = storage_key
        self.legacy_storage_key = legacy_storage_key
        self.clock = clock
        self.half_life_days = half_life_days
        self._snapshot: PreferenceState | None = None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> PreferenceState:
        """Persisted state, or an empty one when absent or unreadable."""
        raw = self.storage.get(self.storage_key)
        if raw is None:
            return PreferenceState.empty()
        try:
            stored = parse_preferences_document(raw)
        except CorruptPayloadError as e:
            logger.warning("Preferences payload corrupt, resetting", key=self.storage_key, error=str(e))
            return PreferenceState.empty()
        if isinstance(stored, LegacyPreferences):
            logger.info("Upgrading legacy preferences payload", key=self.storage_key)
            return upgrade_legacy(stored, self.clock())
        return stored

    def save(self, state: PreferenceState) -> None:
        self.storage.set(self.storage_key, orjson.dumps(state.to_document()).decode())

    def load_legacy(self) -> LegacyPreferences:
        raw = self.storage.get(self.legacy_storage_key)
        if raw is None:
            return LegacyPreferences()
        try:
            stored = parse_preferences_document(raw)
        except CorruptPayloadError as e:
            logger.warning("Legacy preferences corrupt, ignoring", key=self.legacy_storage_key, error=str(e))
            return LegacyPreferences()
        if not isinstance(stored, LegacyPreferences):
            logger.warning("Unexpected versioned payload under legacy key", key=self.legacy_storage_key)
            return LegacyPreferences()
        return stored

    # ------------------------------------------------------------------
    # Decay
    # ------------------------------------------------------------------

    def decay_all(self, half_life_days: float | None = None) -> PreferenceState:
        """Decay every statistic to now and keep the result as the session snapshot."""
        if half_life_days is not None:
            if half_life_days <= 0:
                raise ValueError("half_life_days must be positive")
            self.half_life_days = half_life_days
        self._snapshot = decay_state(self.load(), self.clock(), self.half_life_days)
        logger.debug("Decayed preferences", half_life_days=self.half_life_days)
        return self._snapshot.copy()

    def get_preferences(self) -> PreferenceState:
        """Decayed read-only snapshot for the current session."""
        if self._snapshot is None:
            return self.decay_all()
        return self._snapshot.copy()

    # ------------------------------------------------------------------
    # Bumps
    # ------------------------------------------------------------------

    def bump(self, facet: Facet, key: FacetKey | None, weight: float | None = None) -> KeyStat | None:
        """Add ``weight`` (or the facet default) to ``key`` and persist.

        Returns the new statistic, or ``None`` when the key is empty.
        """
        increment = FACET_BUMP_DEFAULTS[facet.value] if weight is None else float(weight)
        if not math.isfinite(increment) or increment < 0:
            raise ValueError(f"bump weight must be a non-negative number, got {weight!r}")

        normalized = _product_key(key) if facet is Facet.PRODUCT else normalize_key(key)
        if normalized is None or normalized == "":
            logger.debug("Ignoring bump with empty key", facet=facet.value)
            return None

        now = self.clock()
        state = self.load()
        current = state.get(facet, normalized)
        if current is None:
            stat = KeyStat(weight=increment, last_updated=now)
        else:
            stat = KeyStat(
                weight=decayed_weight(current, now, self.half_life_days) + increment,
                last_updated=max(now, current.last_updated),
            )
        state.facet(facet)[normalized] = stat
        self.save(state)

        if self._snapshot is not None:
            self._snapshot.facet(facet)[normalized] = stat
        return stat

    def bump_category(self, key: str | None, weight: float | None = None) -> KeyStat | None:
        return self.bump(Facet.CATEGORY, key, weight)

    def bump_store(self, key: str | None, weight: float | None = None) -> KeyStat | None:
        return self.bump(Facet.STORE, key, weight)

    def bump_gender(self, key: str | None, weight: float | None = None) -> KeyStat | None:
        return self.bump(Facet.GENDER, key, weight)

    def bump_size(self, key: str | None, weight: float | None = None) -> KeyStat | None:
        return self.bump(Facet.SIZE, key, weight)

    def bump_price_bucket(self, key: str | None, weight: float | None = None) -> KeyStat | None:
        return self.bump(Facet.PRICE_BUCKET, key, weight)

    def bump_eta_bucket(self, key: str | None, weight: float | None = None) -> KeyStat | None:
        return self.bump(Facet.ETA_BUCKET, key, weight)

    def bump_product(self, key: int | str | None, weight: float | None = None) -> KeyStat | None:
        return self.bump(Facet.PRODUCT, key, weight)
