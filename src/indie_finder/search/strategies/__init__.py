"""Search strategies, one per intent type plus the hybrid fan-out."""

from .base import MAX_RESULTS, SearchStrategy, deduplicate, rank_results
from .feature import FeatureSearchStrategy
from .genre import GenreSearchStrategy
from .hybrid import HybridSearchStrategy
from .semantic import SemanticSearchStrategy
from .similar import SimilarGamesStrategy

__all__ = [
    "MAX_RESULTS",
    "SearchStrategy",
    "deduplicate",
    "rank_results",
    "FeatureSearchStrategy",
    "GenreSearchStrategy",
    "HybridSearchStrategy",
    "SemanticSearchStrategy",
    "SimilarGamesStrategy",
]
