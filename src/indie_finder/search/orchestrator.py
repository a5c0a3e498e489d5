"""
Search entry point: validate, consult the cache, classify, dispatch to a
strategy, and cache the assembled response.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from urllib.parse import quote

from loguru import logger

from ..cache import SearchCache
from ..models import (
    ReferenceGame,
    ScoredGame,
    SearchContext,
    SearchIntent,
    SearchMetadata,
    SearchResponse,
)
from .intent import IntentClassifier
from .strategies import SearchStrategy


BASE_RESPONSE_TTL = 5 * 60
HIGH_CONFIDENCE = 0.8
FEW_RESULTS = 5
# "Games like X" answers go stale fastest.
SIMILAR_MAX_TTL = 2 * 60

ALL_GAMES_KEY = "all_games"
ALL_GAMES_TTL = 10 * 60
ALL_GAMES_QUERY = "indie games"

STEAM_SEARCH_URL = "https://store.steampowered.com/search/?term="


def response_cache_key(query: str, user_id: str | None = None) -> str:
    base_key = f"search:{query.lower()}"
    return f"{base_key}:user:{user_id}" if user_id else base_key


def response_ttl(intent: SearchIntent, result_count: int) -> float:
    ttl: float = BASE_RESPONSE_TTL
    if intent.confidence > HIGH_CONFIDENCE:
        ttl *= 2
    if result_count < FEW_RESULTS:
        ttl /= 2
    if intent.type == "similar":
        ttl = min(ttl, SIMILAR_MAX_TTL)
    return ttl


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class SearchOrchestrator:
    """Routes queries to the first strategy able to handle their intent."""

    def __init__(
        self,
        classifier: IntentClassifier,
        strategies: Sequence[SearchStrategy],
        cache: SearchCache,
        *,
        default_strategy: SearchStrategy,
        listing_strategy: SearchStrategy | None = None,
    ) -> None:
        self.classifier = classifier
        self.strategies = list(strategies)
        self.cache = cache
        self.default_strategy = default_strategy
        self.listing_strategy = listing_strategy or default_strategy

    async def search(self, query: str, user_id: str | None = None) -> SearchResponse:
        """Run a search. Never raises: failures produce an empty error response."""
        start = time.perf_counter()
        if not isinstance(query, str) or not query.strip():
            logger.warning(f"[Orchestrator] Rejected query {query!r}: must be a non-empty string")
            return self._error_response(query, start)

        normalized_query = query.strip()
        try:

            cache_key = response_cache_key(normalized_query, user_id)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"[Orchestrator] Cache hit for '{normalized_query}'")
                return cached.as_cache_hit()

            intent = await self.classifier.classify(normalized_query)
            context = SearchContext(query=normalized_query, intent=intent, user_id=user_id)

            strategy = self.select_strategy(intent)
            results = await strategy.execute(context)

            response = SearchResponse(
                results=results,
                metadata=SearchMetadata(
                    query=normalized_query,
                    intent=intent,
                    search_type=intent.type,
                    strategy=strategy.name,
                    processing_time_ms=_elapsed_ms(start),
                    result_count=len(results),
                    cache_hit=False,
                ),
            )
            reference = intent.entities.reference_game
            if intent.type == "similar" and reference:
                response.reference_game = ReferenceGame(
                    name=reference,
                    steam_url=f"{STEAM_SEARCH_URL}{quote(reference)}",
                    is_indie=True,
                )

            self.cache.set(cache_key, response, response_ttl(intent, len(results)))
            self._log_search(context, response)
            return response
        except Exception as exc:
            logger.exception(f"[Orchestrator] Search failed for {query!r}: {exc}")
            return self._error_response(query, start)

    async def search_with_metadata(
        self, query: str, user_id: str | None = None
    ) -> SearchResponse:
        """Same as :meth:`search`; the metadata envelope is the contract here."""
        return await self.search(query, user_id)

    async def get_all_games(self) -> list[ScoredGame]:
        cached = self.cache.get(ALL_GAMES_KEY)
        if cached is not None:
            return cached
        context = SearchContext(
            query=ALL_GAMES_QUERY,
            intent=SearchIntent(type="semantic", confidence=1.0, search_strategy="get-all"),
        )
        try:
            results = await self.listing_strategy.execute(context)
        except Exception as exc:
            logger.error(f"[Orchestrator] Failed to get all games: {exc}")
            return []
        self.cache.set(ALL_GAMES_KEY, results, ALL_GAMES_TTL)
        return results

    def select_strategy(self, intent: SearchIntent) -> SearchStrategy:
        for strategy in self.strategies:
            if strategy.can_handle(intent):
                return strategy
        logger.warning(
            f"[Orchestrator] No strategy for intent type {intent.type}, falling back to semantic"
        )
        return self.default_strategy

    def clear_cache(self) -> None:
        self.cache.clear()

    @staticmethod
    def _error_response(query: object, start: float) -> SearchResponse:
        return SearchResponse(
            results=[],
            metadata=SearchMetadata(
                query=query if isinstance(query, str) else "",
                intent=SearchIntent(type="semantic", confidence=0.0, search_strategy="fallback"),
                search_type="error",
                strategy="error",
                processing_time_ms=_elapsed_ms(start),
                result_count=0,
                cache_hit=False,
            ),
        )

    @staticmethod
    def _log_search(context: SearchContext, response: SearchResponse) -> None:
        meta = response.metadata
        logger.info(
            f"[Orchestrator] Search completed: query='{context.query}' "
            f"intent={context.intent.type} confidence={context.intent.confidence:.2f} "
            f"strategy={meta.strategy} results={meta.result_count} "
            f"time={meta.processing_time_ms}ms cache_hit={meta.cache_hit}"
        )
