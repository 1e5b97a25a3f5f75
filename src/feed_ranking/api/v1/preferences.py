"""Preference inspection API endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from feed_ranking.api.dependencies import profile_storage
from feed_ranking.config import Settings, get_settings
from feed_ranking.infrastructure.storage import KeyValueStorage, get_storage
from feed_ranking.services.ranker import FeedRanker

router = APIRouter()


class KeyStatResponse(BaseModel):
    weight: float
    last_updated: float


class PreferencesResponse(BaseModel):
    """Decayed preference snapshot for a profile."""

    profile_id: str
    half_life_days: float
    facets: dict[str, dict[str, KeyStatResponse]]


@router.get("/{profile_id}", response_model=PreferencesResponse)
def get_preferences(
    profile_id: str,
    storage: KeyValueStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> PreferencesResponse:
    """Current preferences, decayed to now. Never written by this endpoint."""
    ranker = FeedRanker.from_settings(profile_storage(storage, profile_id), settings)
    state = ranker.get_preferences()

    return PreferencesResponse(
        profile_id=profile_id,
        half_life_days=ranker.store.half_life_days,
        facets={
            facet.value: {
                str(key): KeyStatResponse(weight=stat.weight, last_updated=stat.last_updated)
                for key, stat in stats.items()
            }
            for facet, stats in state.facets.items()
        },
    )
