"""
Configuration helpers for the game corpus location, reranking, and logging.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from loguru import logger


DEFAULT_DB_PATH = "~/.indie_finder/games.duckdb"
ENV_DB_PATH = "INDIE_FINDER_DB_PATH"
ENV_RERANK = "INDIE_FINDER_RERANK"
ENV_LOG_LEVEL = "INDIE_FINDER_LOG_LEVEL"

_FALSE_VALUES = {"0", "false", "no", "off"}


def resolve_db_path(override_path: str | None = None) -> str:
    """Absolute path of the game corpus database.

    ``--db-path`` wins over ``INDIE_FINDER_DB_PATH``, which wins over
    ``~/.indie_finder/games.duckdb``. Nothing is created on disk: the search
    service opens the corpus read-only, and seeding goes through
    :class:`~indie_finder.corpus.DuckDBCorpus`, which makes its own directory.
    """
    for candidate in (override_path, os.getenv(ENV_DB_PATH)):
        if candidate:
            return str(Path(candidate).expanduser().resolve())
    return str(Path(DEFAULT_DB_PATH).expanduser().resolve())


def rerank_enabled(override: bool | None = None) -> bool:
    """Return whether semantic results go through the LLM reranker."""
    if override is not None:
        return override
    raw = os.getenv(ENV_RERANK, "true")
    return raw.strip().lower() not in _FALSE_VALUES


def configure_logging(level: str | None = None) -> None:
    """Route loguru output to stderr at the requested level."""
    resolved = (level or os.getenv(ENV_LOG_LEVEL, "INFO")).upper()
    logger.remove()
    logger.add(sys.stderr, level=resolved)
