"""Pytest configuration and fixtures."""

import random
from typing import Any

import pytest
from fastapi.testclient import TestClient

from feed_ranking.config import Settings, get_settings
from feed_ranking.infrastructure.storage import InMemoryStorage, get_storage
from feed_ranking.main import create_app
from feed_ranking.models import CatalogItem
from feed_ranking.services.exploration import ExplorationPolicy, ExplorationSelector
from feed_ranking.services.preference_store import PreferenceStore
from feed_ranking.services.ranker import FeedRanker
from feed_ranking.services.view_counts import ViewCountStore

DAY = 86400.0


class FakeClock:
    """Controllable epoch-seconds clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, days: float = 0.0, seconds: float = 0.0) -> None:
        self.now += days * DAY + seconds


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(app_env="test", debug=True, storage_backend="memory")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage: InMemoryStorage, clock: FakeClock) -> PreferenceStore:
    return PreferenceStore(storage, clock=clock, half_life_days=14.0)


@pytest.fixture
def make_ranker(storage: InMemoryStorage, store: PreferenceStore):
    """Build a ranker over the shared store with a fixed seed and no exploration."""

    def _make(seed: int = 12345, epsilon: float = 0.0, rng_seed: int = 7) -> FeedRanker:
        rng = random.Random(rng_seed)
        return FeedRanker(
            store,
            views=ViewCountStore(storage),
            exploration=ExplorationSelector(ExplorationPolicy(epsilon=epsilon), rng=rng),
            rng=rng,
            seed=seed,
        )

    return _make


@pytest.fixture
def make_item():
    def _make(item_id: int, **fields: Any) -> CatalogItem:
        defaults: dict[str, Any] = {
            "name": f"Item {item_id}",
            "store_name": "Loja Centro",
            "price_tag": 150.0,
            "eta_text": "até 1h",
        }
        defaults.update(fields)
        return CatalogItem(id=item_id, **defaults)

    return _make


@pytest.fixture
def app(test_settings: Settings, storage: InMemoryStorage) -> Any:
    """Create test application."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_storage] = lambda: storage
    return app


@pytest.fixture
def client(app: Any) -> TestClient:
    """Create synchronous test client."""
    return TestClient(app)


@pytest.fixture
def sample_profile_id() -> str:
    """Sample profile ID for tests."""
    return "test-profile-123"
