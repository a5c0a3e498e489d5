from .base import (
    CorpusBackend,
    DiscoveryRecord,
    DiscoverySource,
    GameRecord,
    InMemoryCorpus,
    StructuredMetadata,
)
from .duckdb import DuckDBCorpus
from .loader import CorpusLoader, CorpusLoadError
from .records import extract_structured_metadata, game_from_steam

__all__ = [
    "CorpusBackend",
    "CorpusLoader",
    "CorpusLoadError",
    "DiscoveryRecord",
    "DiscoverySource",
    "DuckDBCorpus",
    "GameRecord",
    "InMemoryCorpus",
    "StructuredMetadata",
    "extract_structured_metadata",
    "game_from_steam",
]
