"""User interaction tracking API endpoints."""

from datetime import datetime, timezone
from enum import Enum

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from feed_ranking.api.dependencies import profile_storage
from feed_ranking.config import Settings, get_settings
from feed_ranking.infrastructure.storage import KeyValueStorage, get_storage
from feed_ranking.models import CatalogItem
from feed_ranking.services.interactions import InteractionTracker
from feed_ranking.services.preference_store import Facet
from feed_ranking.services.ranker import FeedRanker

router = APIRouter()


# =============================================================================
# Enums and Models
# =============================================================================


class InteractionType(str, Enum):
    """Types of user interactions."""

    PRODUCT_OPEN = "product_open"
    FILTER_CATEGORY = "filter_category"
    FILTER_STORE = "filter_store"
    FILTER_GENDER = "filter_gender"
    FILTER_SIZE = "filter_size"


FILTER_FACETS = {
    InteractionType.FILTER_CATEGORY: Facet.CATEGORY,
    InteractionType.FILTER_STORE: Facet.STORE,
    InteractionType.FILTER_GENDER: Facet.GENDER,
    InteractionType.FILTER_SIZE: Facet.SIZE,
}


class InteractionRequest(BaseModel):
    """Request model for tracking a user interaction."""

    profile_id: str = Field(..., min_length=1, description="Client profile identifier")
    interaction_type: InteractionType = Field(..., description="Type of interaction")
    item: CatalogItem | None = Field(None, description="Opened product (product_open)")
    value: str | None = Field(None, description="Selected filter value (filter_* interactions)")


class InteractionResponse(BaseModel):
    """Response after recording an interaction."""

    success: bool
    bumped: dict[str, float]
    views: int | None = None
    recorded_at: str


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=InteractionResponse)
def track_interaction(
    interaction: InteractionRequest,
    storage: KeyValueStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> InteractionResponse:
    """
    Track a single user interaction.

    **Interaction Types:**
    - `product_open`: User opened a product detail (requires `item`)
    - `filter_category` / `filter_store` / `filter_gender` / `filter_size`:
      User selected a filter chip (requires `value`)
    """
    if interaction.interaction_type == InteractionType.PRODUCT_OPEN and interaction.item is None:
        raise HTTPException(status_code=400, detail="item is required for product_open interactions")

    if interaction.interaction_type in FILTER_FACETS and not (interaction.value or "").strip():
        raise HTTPException(
            status_code=400,
            detail=f"value is required for {interaction.interaction_type.value} interactions",
        )

    ranker = FeedRanker.from_settings(profile_storage(storage, interaction.profile_id), settings)
    tracker = InteractionTracker(ranker)

    views = None
    if interaction.interaction_type == InteractionType.PRODUCT_OPEN:
        result = tracker.product_opened(interaction.item)
        bumped = {facet: stat.weight for facet, stat in result["bumped"].items()}
        views = result["views"]
    else:
        facet = FILTER_FACETS[interaction.interaction_type]
        stat = tracker.filter_applied(facet, interaction.value)
        bumped = {facet.value: stat.weight} if stat else {}

    return InteractionResponse(
        success=True,
        bumped=bumped,
        views=views,
        recorded_at=datetime.now(timezone.utc).isoformat(),
    )
