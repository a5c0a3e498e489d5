"""
Shared retrieval plumbing for the search strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ...corpus import CorpusLoader
from ...embeddings import QueryEmbedder
from ...models import ScoredGame, SearchContext, SearchIntent, StrategyName
from ..similarity import cosine_similarities, meets_threshold


MAX_RESULTS = 50


def deduplicate(results: list[ScoredGame]) -> list[ScoredGame]:
    """Drop repeated games, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[ScoredGame] = []
    for result in results:
        if result.key not in seen:
            seen.add(result.key)
            unique.append(result)
    return unique


def rank_results(results: list[ScoredGame], *, limit: int = MAX_RESULTS) -> list[ScoredGame]:
    """Stable sort by similarity descending, deduplicate, and cap."""
    ordered = sorted(results, key=lambda r: -r.similarity)
    return deduplicate(ordered)[: max(limit, 1)]


class SearchStrategy(ABC):
    """Retrieval and local ranking for one kind of intent."""

    name: StrategyName

    def __init__(self, loader: CorpusLoader, embedder: QueryEmbedder) -> None:
        self.loader = loader
        self.embedder = embedder

    @abstractmethod
    def can_handle(self, intent: SearchIntent) -> bool:
        """Whether this strategy should serve the intent on its own."""

    def has_signal(self, intent: SearchIntent) -> bool:
        """Whether the intent carries the entities this strategy ranks on."""
        return False

    @abstractmethod
    async def execute(self, context: SearchContext) -> list[ScoredGame]:
        """Return ranked, deduplicated results for the context."""

    @staticmethod
    def score_all(
        query_embedding: list[float],
        record_embeddings: Sequence[list[float] | None],
        threshold: float,
    ) -> list[float | None]:
        """Similarity per record, or None where it has no embedding or is below threshold."""
        scores: list[float | None] = [None] * len(record_embeddings)
        embedded = [i for i, embedding in enumerate(record_embeddings) if embedding]
        if not embedded:
            return scores

        similarities = cosine_similarities(
            query_embedding, [record_embeddings[i] for i in embedded]
        )
        for index, similarity in zip(embedded, similarities):
            similarity = float(similarity)
            if meets_threshold(similarity, threshold):
                scores[index] = similarity
        return scores
