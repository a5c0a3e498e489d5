"""
LLM relevance reranking for the semantic shortlist.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from loguru import logger

from ..llm import Generator
from ..models import ScoredGame


RERANK_CANDIDATES = 40
RERANK_THRESHOLD = 0.4
RERANK_LIMIT = 20

RERANK_SYSTEM_PROMPT = """You judge how well games match a player's search.
For every numbered game, output a relevance score between 0 and 1, where 1 is a perfect match.
Return exactly one score per game, in the order the games are listed.
"""


class RelevanceScores(BaseModel):
    """One relevance score per candidate, in submission order"""

    scores: list[float] = Field(description="Relevance score in [0, 1] for each game, in order")


class RerankError(RuntimeError):
    """Raised when candidates cannot be scored."""


def _describe(index: int, candidate: ScoredGame) -> str:
    game = candidate.game
    tags = ", ".join(game.tags) if game.tags else "none"
    summary = game.description or game.semantic_description
    return f"{index}. {game.title} | tags: {tags} | {summary}"


class Reranker:
    """Scores candidates with the model and keeps the relevant ones.

    Scores are cached per (normalized query, game key) for the life of the
    process with no eviction.
    """

    def __init__(self, generator: Generator) -> None:
        self.generator = generator
        self._scores: dict[tuple[str, str], float] = {}

    async def rerank(self, query: str, candidates: list[ScoredGame]) -> list[ScoredGame]:
        query_key = query.strip().lower()
        shortlist = candidates[:RERANK_CANDIDATES]
        uncached = [c for c in shortlist if (query_key, c.key) not in self._scores]

        if uncached:
            scores = await self._score(query, uncached)
            for candidate, score in zip(uncached, scores):
                self._scores[(query_key, candidate.key)] = score

        scored = [c.with_relevance(self._scores[(query_key, c.key)]) for c in shortlist]
        kept = [c for c in scored if c.relevance is not None and c.relevance >= RERANK_THRESHOLD]
        kept.sort(key=lambda c: (-(c.relevance or 0.0), -c.similarity, c.key))
        logger.debug(
            f"[Rerank] '{query}': {len(kept)}/{len(shortlist)} kept, {len(uncached)} scored by model"
        )
        return kept[:RERANK_LIMIT]

    async def _score(self, query: str, candidates: list[ScoredGame]) -> list[float]:
        listing = "\n".join(_describe(i, c) for i, c in enumerate(candidates, start=1))
        try:
            result = await self.generator.generate_structured(
                RelevanceScores,
                RERANK_SYSTEM_PROMPT,
                f'Search: "{query}"\n\nGames:\n{listing}',
                temperature=0.0,
            )
        except Exception as exc:
            raise RerankError(f"Relevance scoring failed: {exc}") from exc
        if len(result.scores) != len(candidates):
            raise RerankError(
                f"Expected {len(candidates)} scores, model returned {len(result.scores)}"
            )
        return [min(1.0, max(0.0, score)) for score in result.scores]
