"""Feed ranking API endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from feed_ranking.api.dependencies import profile_storage
from feed_ranking.config import Settings, get_settings
from feed_ranking.infrastructure.storage import KeyValueStorage, get_storage
from feed_ranking.models import CatalogItem
from feed_ranking.services.ranker import FeedRanker

router = APIRouter()


class RankRequest(BaseModel):
    """Candidates to rank for one profile."""

    profile_id: str = Field(..., min_length=1, description="Client profile identifier")
    seed: int | None = Field(None, description="Session seed chosen once per page load")
    explore: bool | None = Field(None, description="Force exploration on or off")
    items: list[CatalogItem] = Field(default_factory=list, max_length=500)
    limit: int | None = Field(None, ge=1, le=500)


class RankedItem(BaseModel):
    """A ranked catalog item."""

    id: int
    score: float
    position: int = Field(..., description="Position in the ranked feed")


class RankResponse(BaseModel):
    """Response containing the ranked feed."""

    ranked: list[RankedItem]
    profile_id: str
    seed: int
    generated_at: str


@router.post("/rank", response_model=RankResponse)
def rank_feed(
    request: RankRequest,
    storage: KeyValueStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> RankResponse:
    """
    Rank catalog candidates by learned affinity.

    **Algorithm:**
    1. Decay stored preferences to now
    2. Normalize each facet against its maximum
    3. Blend facet scores, trend and per-session noise
    4. Occasionally explore: boost trend and lift a few mid-ranked items
    """
    ranker = FeedRanker.from_settings(
        profile_storage(storage, request.profile_id), settings, seed=request.seed
    )
    ranked = ranker.rank_with_scores(request.items, explore=request.explore)
    if request.limit:
        ranked = ranked[: request.limit]

    return RankResponse(
        ranked=[
            RankedItem(id=item.id, score=round(score, 6), position=i + 1)
            for i, (item, score) in enumerate(ranked)
        ],
        profile_id=request.profile_id,
        seed=ranker.seed,
        generated_at=datetime.now(timezone.utc).isoformat(),
    )
