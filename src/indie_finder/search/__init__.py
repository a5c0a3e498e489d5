"""Query understanding, retrieval, and ranking."""

from .hyde import QueryExpander
from .intent import IntentClassifier, fallback_classification
from .orchestrator import SearchOrchestrator
from .reranker import Reranker, RerankError
from .similarity import cosine_similarity, meets_threshold
from .strategies import (
    FeatureSearchStrategy,
    GenreSearchStrategy,
    HybridSearchStrategy,
    SearchStrategy,
    SemanticSearchStrategy,
    SimilarGamesStrategy,
)

__all__ = [
    "QueryExpander",
    "IntentClassifier",
    "fallback_classification",
    "SearchOrchestrator",
    "Reranker",
    "RerankError",
    "cosine_similarity",
    "meets_threshold",
    "FeatureSearchStrategy",
    "GenreSearchStrategy",
    "HybridSearchStrategy",
    "SearchStrategy",
    "SemanticSearchStrategy",
    "SimilarGamesStrategy",
]
