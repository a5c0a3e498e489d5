"""
Cached access to the game corpus.

Both corpus views are snapshotted into the shared cache so strategies do not
hit the data store on every request.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from ..cache import SearchCache
from .base import CorpusBackend, DiscoveryRecord, GameRecord


READY_GAMES_KEY = "ready_games"
EMBEDDED_DATA_KEY = "embedded_data"
CORPUS_TTL_SECONDS = 5 * 60


class CorpusLoadError(RuntimeError):
    """Raised when the data store cannot be read."""


class CorpusLoader:
    def __init__(
        self,
        backend: CorpusBackend,
        cache: SearchCache,
        *,
        ttl: float = CORPUS_TTL_SECONDS,
    ) -> None:
        self.backend = backend
        self.cache = cache
        self.ttl = ttl

    async def load_ready_games(self) -> list[GameRecord]:
        cached = self.cache.get(READY_GAMES_KEY)
        if cached is not None:
            return cached
        try:
            games = await asyncio.to_thread(self.backend.load_ready_games)
        except Exception as exc:
            logger.error(f"[Corpus] Failed to load ready games: {exc}")
            raise CorpusLoadError("Unable to load game data") from exc
        logger.debug(f"[Corpus] Loaded {len(games)} ready games")
        self.cache.set(READY_GAMES_KEY, games, self.ttl)
        return games

    async def load_embedded_corpus(self) -> list[DiscoveryRecord]:
        cached = self.cache.get(EMBEDDED_DATA_KEY)
        if cached is not None:
            return cached
        try:
            discoveries = await asyncio.to_thread(self.backend.load_embedded_corpus)
        except Exception as exc:
            logger.error(f"[Corpus] Failed to load embedded corpus: {exc}")
            raise CorpusLoadError("Unable to load game data") from exc
        logger.debug(f"[Corpus] Loaded {len(discoveries)} embedded discoveries")
        self.cache.set(EMBEDDED_DATA_KEY, discoveries, self.ttl)
        return discoveries

    async def refresh(self) -> None:
        """Drop both snapshots and reload them from the backend."""
        self.cache.delete(READY_GAMES_KEY)
        self.cache.delete(EMBEDDED_DATA_KEY)
        await self.load_ready_games()
        await self.load_embedded_corpus()
