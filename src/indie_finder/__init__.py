"""
indie-finder - query understanding and ranking for indie game discovery.

This package turns free-text queries into ranked game lists: it classifies
the query's intent, retrieves candidates from an embedded game corpus with
the strategy that fits the intent, and reranks or merges the results, using
Google Gemini for embeddings and language understanding.

Example usage:
    >>> from indie_finder import search_with_metadata
    >>> response = await search_with_metadata("games like Hades")
    >>> [r.game.title for r in response.results]
"""

from .cache import SearchCache
from .models import (
    IntentEntities,
    ScoredGame,
    SearchContext,
    SearchIntent,
    SearchResponse,
)
from .search import IntentClassifier, SearchOrchestrator
from .service import (
    build_orchestrator,
    get_all_games,
    get_orchestrator,
    reset_orchestrator,
    search_games,
    search_with_metadata,
)

__all__ = [
    # Cache
    "SearchCache",
    # Models
    "IntentEntities",
    "ScoredGame",
    "SearchContext",
    "SearchIntent",
    "SearchResponse",
    # Search
    "IntentClassifier",
    "SearchOrchestrator",
    # Service
    "build_orchestrator",
    "get_all_games",
    "get_orchestrator",
    "reset_orchestrator",
    "search_games",
    "search_with_metadata",
]
