"""
Embedding provider for query-side semantic search.

Wraps the Google GenAI embedding API. Game embeddings are produced upstream by
the enrichment pipeline; the search core only ever embeds queries, reference
game names, and HyDE passages.
"""

from __future__ import annotations

import os
from typing import Any, Protocol

from google.genai import Client as GenAIClient


_DEFAULT_MODEL = "gemini-embedding-001"
_DEFAULT_DIM = 768


class QueryEmbedder(Protocol):
    """Anything that can turn text into a dense vector."""

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single text for retrieval."""


class EmbeddingProvider:
    """Generate query embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv("INDIE_FINDER_EMBEDDING_MODEL", _DEFAULT_MODEL)
        self.dim = dim or int(os.getenv("INDIE_FINDER_EMBEDDING_DIM", str(_DEFAULT_DIM)))

        if client is not None:
            self._client = client
        else:
            resolved_key = api_key or os.getenv("GOOGLE_API_KEY")
            if resolved_key is None:
                raise ValueError(
                    "GOOGLE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            self._client = GenAIClient(api_key=resolved_key)

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query text for retrieval."""
        result = await self._client.aio.models.embed_content(
            model=self.model,
            contents=[text],
            config={
                "task_type": "RETRIEVAL_QUERY",
                "output_dimensionality": self.dim,
            },
        )
        return list(result.embeddings[0].values)
