"""
Service wiring and the process-wide orchestrator.

`build_orchestrator` assembles isolated instances (tests pass fakes for every
external collaborator); `get_orchestrator` lazily builds the shared one from
the environment.
"""

from __future__ import annotations

from .cache import SearchCache
from .config import rerank_enabled, resolve_db_path
from .corpus import CorpusBackend, CorpusLoader, DuckDBCorpus
from .embeddings import EmbeddingProvider, QueryEmbedder
from .llm import Generator, TextGenerator
from .models import ScoredGame, SearchResponse
from .search import (
    FeatureSearchStrategy,
    GenreSearchStrategy,
    HybridSearchStrategy,
    IntentClassifier,
    QueryExpander,
    Reranker,
    SearchOrchestrator,
    SemanticSearchStrategy,
    SimilarGamesStrategy,
)


def build_orchestrator(
    *,
    backend: CorpusBackend | None = None,
    embedder: QueryEmbedder | None = None,
    generator: Generator | None = None,
    cache: SearchCache | None = None,
    enable_rerank: bool | None = None,
    db_path: str | None = None,
) -> SearchOrchestrator:
    if cache is None:
        cache = SearchCache()
    if backend is None:
        backend = DuckDBCorpus(resolve_db_path(db_path), read_only=True, initialize=False)
    if embedder is None:
        embedder = EmbeddingProvider()
    if generator is None:
        generator = TextGenerator()

    loader = CorpusLoader(backend, cache)
    expander = QueryExpander(embedder, generator)
    reranker = Reranker(generator) if rerank_enabled(enable_rerank) else None

    semantic = SemanticSearchStrategy(loader, embedder, expander=expander, reranker=reranker)
    similar = SimilarGamesStrategy(loader, embedder)
    genre = GenreSearchStrategy(loader, embedder)
    feature = FeatureSearchStrategy(loader, embedder)
    hybrid = HybridSearchStrategy([semantic, genre, feature, similar], fallback=semantic)

    return SearchOrchestrator(
        IntentClassifier(cache, generator),
        [semantic, similar, genre, feature, hybrid],
        cache,
        default_strategy=semantic,
        listing_strategy=SemanticSearchStrategy(loader, embedder, expander=expander),
    )


_ORCHESTRATOR: SearchOrchestrator | None = None


def get_orchestrator() -> SearchOrchestrator:
    global _ORCHESTRATOR
    if _ORCHESTRATOR is None:
        _ORCHESTRATOR = build_orchestrator()
    return _ORCHESTRATOR


def reset_orchestrator(orchestrator: SearchOrchestrator | None = None) -> None:
    """Replace (or drop) the shared orchestrator."""
    global _ORCHESTRATOR
    _ORCHESTRATOR = orchestrator


async def search_games(query: str) -> list[ScoredGame]:
    response = await get_orchestrator().search(query)
    return response.results


async def get_all_games() -> list[ScoredGame]:
    return await get_orchestrator().get_all_games()


async def search_with_metadata(query: str, user_id: str | None = None) -> SearchResponse:
    return await get_orchestrator().search_with_metadata(query, user_id)
