"""
DuckDB corpus backend.

The enrichment pipeline owns the data; this adapter only reads the two corpus
views, plus the minimal writes needed to seed a local database.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import duckdb

from .base import DiscoveryRecord, DiscoverySource, GameRecord
from .records import game_from_steam


_FALLBACK_AUTHOR = "IndieGameDev"


def _parse_embedding(raw: Any) -> list[float] | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = json.loads(raw)
    return [float(v) for v in raw]


def _parse_json(raw: Any, default: Any) -> Any:
    if raw is None:
        return default
    if isinstance(raw, str):
        return json.loads(raw) if raw else default
    return raw


class DuckDBCorpus:
    """DuckDB-backed read access to enriched games and discovery posts."""

    def __init__(
        self,
        db_path: str,
        *,
        read_only: bool = False,
        initialize: bool = True,
    ) -> None:
        self.db_path = str(Path(db_path).expanduser().resolve())
        self.read_only = read_only
        if read_only and not Path(self.db_path).exists():
            raise ValueError(f"Corpus database not found: {self.db_path}")
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(self.db_path, read_only=read_only)
        if initialize and not read_only:
            self.initialize()

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    def initialize(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS games (
                app_id VARCHAR PRIMARY KEY,
                status VARCHAR NOT NULL DEFAULT 'ready',
                semantic_description VARCHAR NOT NULL DEFAULT '',
                embedding DOUBLE[],
                steam_data VARCHAR NOT NULL DEFAULT '{}'
            );
            """
        )
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS discoveries (
                id VARCHAR PRIMARY KEY,
                author VARCHAR NOT NULL,
                text VARCHAR NOT NULL DEFAULT '',
                url VARCHAR NOT NULL DEFAULT '',
                embedding DOUBLE[],
                steam_profiles VARCHAR NOT NULL DEFAULT '[]'
            );
            """
        )

    def upsert_game(
        self,
        *,
        app_id: str,
        steam_data: dict[str, Any],
        embedding: list[float] | None,
        semantic_description: str = "",
        status: str = "ready",
    ) -> None:
        self._conn.execute(
            """
            INSERT INTO games (app_id, status, semantic_description, embedding, steam_data)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(app_id) DO UPDATE SET
                status = excluded.status,
                semantic_description = excluded.semantic_description,
                embedding = excluded.embedding,
                steam_data = excluded.steam_data
            """,
            [app_id, status, semantic_description, embedding, json.dumps(steam_data)],
        )

    def upsert_discovery(
        self,
        *,
        discovery_id: str,
        author: str,
        steam_profiles: list[dict[str, Any]],
        embedding: list[float] | None,
        text: str = "",
        url: str = "",
    ) -> None:
        self._conn.execute(
            """
            INSERT INTO discoveries (id, author, text, url, embedding, steam_profiles)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                author = excluded.author,
                text = excluded.text,
                url = excluded.url,
                embedding = excluded.embedding,
                steam_profiles = excluded.steam_profiles
            """,
            [discovery_id, author, text, url, embedding, json.dumps(steam_profiles)],
        )

    def load_ready_games(self) -> list[GameRecord]:
        # A cursor is an independent connection, so loads may run off-thread.
        cursor = self._conn.cursor()
        try:
            rows = cursor.execute(
                """
                SELECT app_id, semantic_description, embedding, steam_data
                FROM games
                WHERE status = 'ready'
                ORDER BY app_id
                """
            ).fetchall()
        finally:
            cursor.close()

        games: list[GameRecord] = []
        for app_id, semantic_description, embedding, steam_data in rows:
            data = _parse_json(steam_data, {})
            developers = data.get("developers") or []
            source = DiscoverySource(
                id=f"game_{app_id}",
                author=str(developers[0]) if developers else _FALLBACK_AUTHOR,
                text=str(semantic_description or ""),
                url=f"https://store.steampowered.com/app/{app_id}",
            )
            games.append(
                game_from_steam(
                    app_id,
                    data,
                    embedding=_parse_embedding(embedding),
                    semantic_description=str(semantic_description or ""),
                    source=source,
                )
            )
        return games

    def load_embedded_corpus(self) -> list[DiscoveryRecord]:
        cursor = self._conn.cursor()
        try:
            rows = cursor.execute(
                """
                SELECT id, author, text, url, embedding, steam_profiles
                FROM discoveries
                ORDER BY id
                """
            ).fetchall()
        finally:
            cursor.close()

        discoveries: list[DiscoveryRecord] = []
        for discovery_id, author, text, url, embedding, steam_profiles in rows:
            source = DiscoverySource(
                id=str(discovery_id), author=str(author), text=str(text or ""), url=str(url or "")
            )
            games = [
                game_from_steam(
                    profile.get("appId", ""),
                    profile.get("rawData"),
                    semantic_description=str(text or ""),
                    source=source,
                )
                for profile in _parse_json(steam_profiles, [])
            ]
            discoveries.append(
                DiscoveryRecord(
                    source=source,
                    games=games,
                    embedding=_parse_embedding(embedding),
                )
            )
        return discoveries
