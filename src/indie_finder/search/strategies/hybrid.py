"""
Fan-out strategy for queries that carry several signals at once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from ...models import ScoredGame, SearchContext, SearchIntent
from .base import MAX_RESULTS, SearchStrategy


RANK_WEIGHT = 0.4
SIMILARITY_WEIGHT = 0.6
APPEARANCE_BONUS = 0.1
MAX_APPEARANCE_BONUS = 0.2

DEFAULT_WEIGHT = 1.0
GENRE_WEIGHT = 1.3
FEATURE_WEIGHT = 1.3
SIMILAR_WEIGHT = 1.5
LOW_CONFIDENCE_SEMANTIC_WEIGHT = 1.2
LOW_CONFIDENCE = 0.7


@dataclass(frozen=True)
class StrategyHit:
    strategy: str
    score: float
    rank: int


@dataclass
class _MergedGame:
    result: ScoredGame
    hits: list[StrategyHit] = field(default_factory=list)


def rank_score(index: int, total: int, similarity: float) -> float:
    """Blend list position and raw similarity for one strategy's result."""
    position = max(0.0, 1.0 - index / total)
    return position * RANK_WEIGHT + similarity * SIMILARITY_WEIGHT


def strategy_weights(intent: SearchIntent) -> dict[str, float]:
    weights = {
        "semantic-search": DEFAULT_WEIGHT,
        "genre-search": DEFAULT_WEIGHT,
        "feature-search": DEFAULT_WEIGHT,
        "similar-games": DEFAULT_WEIGHT,
    }
    entities = intent.entities
    if entities.genres:
        weights["genre-search"] = GENRE_WEIGHT
    if entities.features or entities.play_modes:
        weights["feature-search"] = FEATURE_WEIGHT
    if entities.reference_game:
        weights["similar-games"] = SIMILAR_WEIGHT
    if intent.confidence < LOW_CONFIDENCE:
        # Uncertain classification: lean on plain semantic retrieval.
        weights["semantic-search"] = LOW_CONFIDENCE_SEMANTIC_WEIGHT
    return weights


def merge_results(
    results: Sequence[tuple[str, list[ScoredGame]]],
    intent: SearchIntent,
    *,
    limit: int = MAX_RESULTS,
) -> list[ScoredGame]:
    """Combine per-strategy rankings into one list scored by weighted rank."""
    merged: dict[str, _MergedGame] = {}
    for strategy, strategy_results in results:
        total = len(strategy_results)
        for index, result in enumerate(strategy_results):
            entry = merged.setdefault(result.key, _MergedGame(result=result))
            entry.hits.append(
                StrategyHit(
                    strategy=strategy,
                    score=rank_score(index, total, result.similarity),
                    rank=index + 1,
                )
            )

    weights = strategy_weights(intent)
    scored: list[tuple[float, str, ScoredGame]] = []
    for key, entry in merged.items():
        total_score = sum(hit.score * weights.get(hit.strategy, DEFAULT_WEIGHT) for hit in entry.hits)
        total_score += min(MAX_APPEARANCE_BONUS, (len(entry.hits) - 1) * APPEARANCE_BONUS)
        scored.append((total_score, key, entry.result.with_similarity(total_score)))

    scored.sort(key=lambda item: (-item[0], item[1]))
    return [result for _, _, result in scored[: max(limit, 1)]]


class HybridSearchStrategy(SearchStrategy):
    """Run every applicable strategy concurrently and merge their rankings."""

    name = "hybrid-search"

    def __init__(
        self,
        strategies: Sequence[SearchStrategy],
        fallback: SearchStrategy,
    ) -> None:
        super().__init__(fallback.loader, fallback.embedder)
        self.strategies = list(strategies)
        self.fallback = fallback

    def can_handle(self, intent: SearchIntent) -> bool:
        return intent.type == "hybrid" or intent.entities.signal_count() > 1

    def applicable(self, intent: SearchIntent) -> list[SearchStrategy]:
        return [s for s in self.strategies if s.can_handle(intent) or s.has_signal(intent)]

    async def execute(self, context: SearchContext) -> list[ScoredGame]:
        applicable = self.applicable(context.intent)
        if not applicable:
            return await self.fallback.execute(context)

        logger.debug(f"[Hybrid] Running {[s.name for s in applicable]} for '{context.query}'")
        results = await asyncio.gather(*(self._run(s, context) for s in applicable))
        return merge_results(results, context.intent)

    @staticmethod
    async def _run(
        strategy: SearchStrategy, context: SearchContext
    ) -> tuple[str, list[ScoredGame]]:
        try:
            return strategy.name, await strategy.execute(context)
        except Exception as exc:
            logger.warning(f"[Hybrid] Strategy {strategy.name} failed: {exc}")
            return strategy.name, []
