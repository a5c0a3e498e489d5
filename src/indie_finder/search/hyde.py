"""
Hypothetical document expansion (HyDE) for ultra-short queries.

One or two words embed too sparsely to match the long game descriptions in
the corpus. For those queries we ask the model for a dense descriptor, embed
it, and blend it into the raw query embedding.
"""

from __future__ import annotations

from loguru import logger

from ..embeddings import QueryEmbedder
from ..llm import Generator
from .similarity import blend


MAX_EXPANDED_TOKENS = 2

# The synthesized passage carries most of the signal; the raw query keeps the
# blend anchored to what the user actually typed.
RAW_QUERY_WEIGHT = 0.35
HYDE_WEIGHT = 0.65

HYDE_SYSTEM_PROMPT = """You expand ultra-short search queries into dense game descriptors for semantic search.
Focus on gameplay mechanics, visual style, and player experience.
Prefer specific features over vague vibes. Keep under 24 words.

Examples:
- "roguelike" -> "procedurally generated dungeon crawler with permadeath combat progression random levels"
- "cozy" -> "relaxing peaceful gameplay low-stress exploration crafting wholesome atmosphere"
- "challenging" -> "difficult gameplay precise timing skill-based mechanics demanding player mastery"
"""


def token_count(query: str) -> int:
    return len(query.split())


class QueryExpander:
    """Blend a generated descriptor into short query embeddings.

    Descriptor embeddings are cached per normalized query for the life of the
    process with no eviction; the key space is the set of distinct one- and
    two-word queries, which stays small.
    """

    def __init__(self, embedder: QueryEmbedder, generator: Generator) -> None:
        self.embedder = embedder
        self.generator = generator
        self._cache: dict[str, list[float]] = {}

    def should_expand(self, query: str) -> bool:
        return token_count(query) <= MAX_EXPANDED_TOKENS

    async def expand(self, query: str, base_embedding: list[float]) -> list[float]:
        """Return the blended embedding, or *base_embedding* when expansion fails."""
        if not self.should_expand(query):
            return base_embedding

        cache_key = query.strip().lower()
        hyde_embedding = self._cache.get(cache_key)
        if hyde_embedding is None:
            try:
                hypothetical = await self.generator.generate(
                    HYDE_SYSTEM_PROMPT,
                    f'User query: "{query}"\n\nExpand this into a rich descriptor:',
                    temperature=0.0,
                )
                hyde_embedding = await self.embedder.embed_query(hypothetical.replace("\n", " "))
            except Exception as exc:
                logger.warning(f"[HyDE] Expansion failed for '{query}': {exc}")
                return base_embedding
            self._cache[cache_key] = hyde_embedding
            logger.debug(f"[HyDE] Expanded '{query}' -> '{hypothetical}'")

        return blend(base_embedding, hyde_embedding, RAW_QUERY_WEIGHT, HYDE_WEIGHT)
