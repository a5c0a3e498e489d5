"""
Embedding search over discovery posts, with HyDE for short queries and an
optional LLM rerank of the shortlist.
"""

from __future__ import annotations

from loguru import logger

from ...corpus import CorpusLoader
from ...embeddings import QueryEmbedder
from ...models import ScoredGame, SearchContext, SearchIntent
from ..hyde import QueryExpander
from ..reranker import Reranker
from .base import SearchStrategy, rank_results


SHORT_QUERY_CHARS = 5
SHORT_QUERY_THRESHOLD = 0.15  # permissive: short queries embed sparsely
MOOD_THRESHOLD = 0.30  # stricter: mood matches are noisy
DEFAULT_THRESHOLD = 0.25


def semantic_threshold(query: str, intent: SearchIntent) -> float:
    if len(query) <= SHORT_QUERY_CHARS:
        return SHORT_QUERY_THRESHOLD
    if intent.type == "mood":
        return MOOD_THRESHOLD
    return DEFAULT_THRESHOLD


class SemanticSearchStrategy(SearchStrategy):
    name = "semantic-search"

    def __init__(
        self,
        loader: CorpusLoader,
        embedder: QueryEmbedder,
        *,
        expander: QueryExpander | None = None,
        reranker: Reranker | None = None,
    ) -> None:
        super().__init__(loader, embedder)
        self.expander = expander
        self.reranker = reranker

    def can_handle(self, intent: SearchIntent) -> bool:
        return intent.type in ("semantic", "mood")

    def has_signal(self, intent: SearchIntent) -> bool:
        return self.can_handle(intent) or bool(intent.entities.mood)

    async def query_embedding(self, query: str) -> list[float]:
        embedding = await self.embedder.embed_query(query)
        if self.expander is not None:
            embedding = await self.expander.expand(query, embedding)
        return embedding

    async def execute(self, context: SearchContext) -> list[ScoredGame]:
        query_embedding = await self.query_embedding(context.query)
        discoveries = await self.loader.load_embedded_corpus()
        threshold = semantic_threshold(context.query, context.intent)

        scores = self.score_all(query_embedding, [d.embedding for d in discoveries], threshold)

        candidates: list[ScoredGame] = []
        for discovery, similarity in zip(discoveries, scores):
            if similarity is None:
                continue
            # Every game linked from a post shares the post's embedding.
            candidates.extend(
                ScoredGame(game=game, similarity=similarity)
                for game in discovery.games
                if game.metadata is not None
            )

        ranked = rank_results(candidates)
        logger.debug(
            f"[Semantic] '{context.query}': {len(ranked)} candidates at threshold {threshold}"
        )
        if self.reranker is None:
            return ranked
        return await self.reranker.rerank(context.query, ranked)
