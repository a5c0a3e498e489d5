"""Tests for the REST endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import indie_finder.search.strategies.base as base_module
import indie_finder.server as server_module
from indie_finder.cache import SearchCache
from indie_finder.corpus import InMemoryCorpus
from indie_finder.server import app
from indie_finder.service import build_orchestrator, reset_orchestrator

from conftest import FakeEmbedder, FakeGenerator, make_discovery, make_game


@pytest.fixture()
def client(monkeypatch):
    monkeypatch.setattr(base_module, "cosine_similarities", lambda query, rows: [row[0] for row in rows])
    games = [
        make_game(str(i), f"Game {i}", tags=["Puzzle"], embedding=[0.9 - i / 100])
        for i in range(12)
    ]
    games[0] = make_game("0", "Game 0", tags=["Puzzle"], embedding=[0.95])
    orchestrator = build_orchestrator(
        backend=InMemoryCorpus(
            games=games,
            discoveries=[make_discovery("d1", games[:3], [0.8])],
        ),
        embedder=FakeEmbedder(),
        generator=FakeGenerator(fail=True),
        cache=SearchCache(),
        enable_rerank=False,
    )
    reset_orchestrator(orchestrator)
    try:
        yield TestClient(app)
    finally:
        reset_orchestrator()


def test_search_endpoint_returns_envelope_without_embeddings(client: TestClient) -> None:
    response = client.get("/api/search", params={"q": "puzzle"})

    assert response.status_code == 200
    data = response.json()
    assert data["metadata"]["search_type"] == "genre"
    assert data["metadata"]["strategy"] == "genre-search"
    assert data["metadata"]["cache_hit"] is False
    assert data["total_count"] == 12
    assert len(data["results"]) == 12
    assert "embedding" not in data["results"][0]["game"]
    assert data["results"][0]["game"]["title"] == "Game 0"


def test_search_endpoint_paginates(client: TestClient) -> None:
    response = client.get("/api/search", params={"q": "puzzle", "page": 2, "page_size": 5})

    data = response.json()
    assert data["page"] == 2
    assert data["page_size"] == 5
    assert data["has_more"] is True
    assert [r["game"]["app_id"] for r in data["results"]] == ["5", "6", "7", "8", "9"]

    last = client.get("/api/search", params={"q": "puzzle", "page": 3, "page_size": 5}).json()
    assert last["has_more"] is False
    assert len(last["results"]) == 2
    assert last["metadata"]["cache_hit"] is True


def test_search_endpoint_empty_query_is_error_envelope(client: TestClient) -> None:
    data = client.get("/api/search").json()
    assert data["results"] == []
    assert data["metadata"]["result_count"] == 0
    assert data["metadata"]["search_type"] == "error"


def test_search_endpoint_rejects_oversized_page(client: TestClient) -> None:
    response = client.get("/api/search", params={"q": "puzzle", "page_size": 500})
    assert response.status_code == 422


def test_games_endpoint_lists_corpus(client: TestClient) -> None:
    data = client.get("/api/games").json()
    assert data["count"] == 3
    assert data["games"][0]["store_url"] == "https://store.steampowered.com/app/0"
    assert "embedding" not in data["games"][0]


def test_cache_clear_endpoint(client: TestClient) -> None:
    client.get("/api/search", params={"q": "puzzle"})
    assert client.post("/api/cache/clear").json() == {"cleared": True}
    data = client.get("/api/search", params={"q": "puzzle"}).json()
    assert data["metadata"]["cache_hit"] is False


def test_missing_credentials_surface_as_503(monkeypatch) -> None:
    def unavailable():
        raise ValueError("GOOGLE_API_KEY not found")

    monkeypatch.setattr(server_module, "get_orchestrator", unavailable)
    response = TestClient(app).get("/api/search", params={"q": "puzzle"})
    assert response.status_code == 503
    assert response.json() == {"error": "GOOGLE_API_KEY not found"}
