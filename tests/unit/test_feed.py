"""Unit tests for feed ranking and preference endpoints."""

import pytest
from fastapi.testclient import TestClient

ITEMS = [
    {"id": 1, "name": "Bota", "store_name": "Loja A", "category": "shoes", "price_tag": 250},
    {"id": 2, "name": "Bolsa", "store_name": "Loja B", "category": "bags", "price_tag": 900},
    {"id": 3, "name": "Tênis", "store_name": "Loja A", "category": "shoes", "price_tag": 180},
    {"id": 4, "name": "Sem preço", "store_name": "Loja C"},
]


def rank(client: TestClient, profile_id: str, **extra) -> dict:
    response = client.post(
        "/api/v1/feed/rank",
        json={"profile_id": profile_id, "seed": 4242, "explore": False, "items": ITEMS, **extra},
    )
    assert response.status_code == 200
    return response.json()


def test_rank_without_history(client: TestClient, sample_profile_id: str) -> None:
    data = rank(client, sample_profile_id)
    assert data["seed"] == 4242
    assert [r["position"] for r in data["ranked"]] == [1, 2, 3, 4]
    assert sorted(r["id"] for r in data["ranked"]) == [1, 2, 3, 4]
    assert all(0.0 <= r["score"] <= 0.05 for r in data["ranked"])


def test_rank_follows_learned_preference(client: TestClient, sample_profile_id: str) -> None:
    client.post(
        "/api/v1/interactions",
        json={"profile_id": sample_profile_id, "interaction_type": "filter_category", "value": "bags"},
    )
    assert rank(client, sample_profile_id)["ranked"][0]["id"] == 2


def test_rank_is_deterministic_for_seed(client: TestClient, sample_profile_id: str) -> None:
    first = [r["id"] for r in rank(client, sample_profile_id)["ranked"]]
    second = [r["id"] for r in rank(client, sample_profile_id)["ranked"]]
    assert first == second


def test_profiles_do_not_share_preferences(client: TestClient) -> None:
    client.post(
        "/api/v1/interactions",
        json={"profile_id": "one", "interaction_type": "filter_category", "value": "bags"},
    )
    assert rank(client, "one")["ranked"][0]["id"] == 2
    assert rank(client, "two")["ranked"][0]["score"] < 0.1


def test_rank_limit(client: TestClient, sample_profile_id: str) -> None:
    assert len(rank(client, sample_profile_id, limit=2)["ranked"]) == 2


def test_rank_rejects_item_without_id(client: TestClient, sample_profile_id: str) -> None:
    response = client.post(
        "/api/v1/feed/rank",
        json={"profile_id": sample_profile_id, "items": [{"name": "no id"}]},
    )
    assert response.status_code == 422


def test_get_preferences(client: TestClient, sample_profile_id: str) -> None:
    client.post(
        "/api/v1/interactions",
        json={"profile_id": sample_profile_id, "interaction_type": "filter_size", "value": "M"},
    )
    response = client.get(f"/api/v1/preferences/{sample_profile_id}")
    assert response.status_code == 200

    data = response.json()
    assert data["half_life_days"] == 14.0
    assert set(data["facets"]) == {"cat", "store", "gender", "size", "price", "eta", "product"}
    assert data["facets"]["size"]["m"]["weight"] == pytest.approx(0.3)


def test_negative_view_count_does_not_block_feed(client: TestClient, sample_profile_id: str) -> None:
    response = client.post(
        "/api/v1/feed/rank",
        json={
            "profile_id": sample_profile_id,
            "explore": False,
            "items": [
                {"id": 1, "category": "shoes"},
                {"id": 2, "category": "bags", "view_count": -1},
            ],
        },
    )
    assert response.status_code == 200
    assert sorted(r["id"] for r in response.json()["ranked"]) == [1, 2]
