"""API v1 router that aggregates all endpoint routers."""

from fastapi import APIRouter

from feed_ranking.api.v1 import feed, health, interactions, preferences

api_router = APIRouter()

# Include all routers
api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    feed.router,
    prefix="/feed",
    tags=["Feed"],
)

api_router.include_router(
    interactions.router,
    prefix="/interactions",
    tags=["Interactions"],
)

api_router.include_router(
    preferences.router,
    prefix="/preferences",
    tags=["Preferences"],
)
