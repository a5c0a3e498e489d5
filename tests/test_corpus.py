"""Tests for corpus records, the DuckDB backend, and the cached loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from indie_finder.cache import SearchCache
from indie_finder.corpus import (
    CorpusLoader,
    CorpusLoadError,
    DuckDBCorpus,
    InMemoryCorpus,
    extract_structured_metadata,
    game_from_steam,
)

from conftest import FakeClock, make_game


STEAM_DATA = {
    "name": "Hades",
    "short_description": "Defy the god of the dead.",
    "developers": ["Supergiant Games"],
    "publishers": ["Supergiant Games"],
    "price_overview": {"final_formatted": "$24.99"},
    "genres": [{"description": "Action"}, {"description": "Indie"}, {"description": "RPG"}],
    "categories": [
        {"description": "Single-player"},
        {"description": "Online Co-op"},
        {"description": "Shared/Split Screen PvP"},
    ],
    "release_date": {"coming_soon": False, "date": "17 Sep, 2020"},
    "header_image": "https://cdn/header.jpg",
    "screenshots": [{"path_full": f"https://cdn/{i}.jpg"} for i in range(6)],
}


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------


def test_structured_metadata_from_steam_payload() -> None:
    metadata = extract_structured_metadata(STEAM_DATA)
    assert metadata.tags == ["Action", "Indie", "RPG"]
    assert metadata.play_modes == ["single-player", "co-op", "pvp", "split-screen"]
    assert metadata.price == "$24.99"
    assert metadata.is_free is False
    assert metadata.release_status == "Released"


def test_free_upcoming_game() -> None:
    metadata = extract_structured_metadata(
        {"is_free": True, "release_date": {"coming_soon": True}}
    )
    assert metadata.price == "Free"
    assert metadata.is_free is True
    assert metadata.release_status == "Upcoming"


def test_game_from_steam_builds_display_fields() -> None:
    game = game_from_steam(1145360, STEAM_DATA, embedding=[0.1, 0.2])
    assert game.app_id == "1145360"
    assert game.title == "Hades"
    assert game.price == "$24.99"
    assert game.developer == "Supergiant Games"
    assert game.release_date == "17 Sep, 2020"
    assert game.images[0] == "https://cdn/header.jpg"
    assert len(game.images) == 5
    assert game.store_url == "https://store.steampowered.com/app/1145360"
    assert "embedding" not in repr(game)


def test_empty_payload_has_no_metadata() -> None:
    game = game_from_steam("42", None)
    assert game.metadata is None
    assert game.title == ""
    assert game.price == "N/A"


# ---------------------------------------------------------------------------
# DuckDB backend
# ---------------------------------------------------------------------------


def test_duckdb_round_trips_ready_games(tmp_path: Path) -> None:
    corpus = DuckDBCorpus(str(tmp_path / "games.duckdb"))
    corpus.upsert_game(
        app_id="2", steam_data=STEAM_DATA, embedding=[0.5, 0.5], semantic_description="fast"
    )
    corpus.upsert_game(app_id="1", steam_data={"name": "Pending"}, embedding=None, status="pending")
    corpus.upsert_game(app_id="3", steam_data={"name": "Bare"}, embedding=[1.0, 0.0])
    corpus.upsert_game(
        app_id="3", steam_data={"name": "Updated"}, embedding=[0.0, 1.0], semantic_description="x"
    )

    games = corpus.load_ready_games()
    assert [g.app_id for g in games] == ["2", "3"]
    assert games[0].embedding == [0.5, 0.5]
    assert games[0].source.author == "Supergiant Games"
    assert games[0].source.id == "game_2"
    assert games[1].title == "Updated"
    assert games[1].source.author == "IndieGameDev"
    corpus.close()


def test_duckdb_loads_discoveries_with_linked_games(tmp_path: Path) -> None:
    corpus = DuckDBCorpus(str(tmp_path / "games.duckdb"))
    corpus.upsert_discovery(
        discovery_id="tweet-1",
        author="@indiedev",
        text="Check out Hades",
        url="https://x.com/indiedev/1",
        embedding=[0.3, 0.4],
        steam_profiles=[
            {"appId": "1145360", "rawData": STEAM_DATA},
            {"appId": "999", "rawData": None},
        ],
    )

    (discovery,) = corpus.load_embedded_corpus()
    assert discovery.source.author == "@indiedev"
    assert discovery.embedding == [0.3, 0.4]
    assert [g.app_id for g in discovery.games] == ["1145360", "999"]
    assert discovery.games[0].semantic_description == "Check out Hades"
    assert discovery.games[1].metadata is None
    corpus.close()


def test_read_only_corpus_reads_existing_database(tmp_path: Path) -> None:
    db_path = str(tmp_path / "games.duckdb")
    writer = DuckDBCorpus(db_path)
    writer.upsert_game(app_id="7", steam_data=STEAM_DATA, embedding=[1.0])
    writer.close()

    reader = DuckDBCorpus(db_path, read_only=True)
    assert [g.title for g in reader.load_ready_games()] == ["Hades"]
    reader.close()


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class CountingCorpus(InMemoryCorpus):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.loads = 0

    def load_ready_games(self):
        self.loads += 1
        return super().load_ready_games()


class FailingCorpus:
    def load_ready_games(self):
        raise OSError("disk gone")

    def load_embedded_corpus(self):
        raise OSError("disk gone")


@pytest.mark.asyncio
async def test_loader_snapshots_until_ttl() -> None:
    clock = FakeClock()
    backend = CountingCorpus(games=[make_game("1", "A")])
    loader = CorpusLoader(backend, SearchCache(clock=clock), ttl=300)

    await loader.load_ready_games()
    await loader.load_ready_games()
    assert backend.loads == 1

    clock.advance(301)
    await loader.load_ready_games()
    assert backend.loads == 2

    await loader.refresh()
    assert backend.loads == 3


@pytest.mark.asyncio
async def test_loader_wraps_backend_errors() -> None:
    loader = CorpusLoader(FailingCorpus(), SearchCache())
    with pytest.raises(CorpusLoadError) as exc_info:
        await loader.load_ready_games()
    assert isinstance(exc_info.value.__cause__, OSError)

    with pytest.raises(CorpusLoadError):
        await loader.load_embedded_corpus()


def test_read_only_corpus_requires_existing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        DuckDBCorpus(str(tmp_path / "missing.duckdb"), read_only=True)
