"""
Query intent classification.

The model-backed path labels the query with one of six intent types and
extracts entities. When the model is unavailable or returns malformed output,
a deterministic rule-based classifier takes over; it never raises.
"""

from __future__ import annotations

import re

from loguru import logger

from ..cache import SearchCache
from ..llm import Generator
from ..models import IntentEntities, SearchIntent


INTENT_CACHE_PREFIX = "intent:"
INTENT_TTL_SECONDS = 5 * 60

SIMILAR_CONFIDENCE = 0.8
FEATURE_CONFIDENCE = 0.7
GENRE_CONFIDENCE = 0.75
SEMANTIC_CONFIDENCE = 0.6

GENRE_KEYWORDS = (
    "roguelike",
    "platformer",
    "puzzle",
    "rpg",
    "strategy",
    "shooter",
    "racing",
    "simulation",
    "adventure",
    "action",
)

_SIMILAR_RE = re.compile(r"\b(?:games?\s+)?(?:like|similar\s+to)\s+(.+)", re.IGNORECASE)
_FILLER_CHARS = " \t\"'`?!.,;:"

# Token pattern -> normalized play mode, matching the modes extracted from
# Steam categories.
_PLAY_MODE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bco-?op\b", re.IGNORECASE), "co-op"),
    (re.compile(r"\bmulti[- ]?player\b", re.IGNORECASE), "multi-player"),
    (re.compile(r"\bsplit[- ]?screen\b", re.IGNORECASE), "split-screen"),
)

CLASSIFIER_SYSTEM_PROMPT = """You classify search queries for an indie game discovery site.

Choose exactly one type:
- semantic: a free-form description of the kind of game wanted
- similar: the user names a game and wants games like it (fill entities.reference_game)
- genre: the query is mainly about genres (fill entities.genres)
- mood: the query is about a feeling or atmosphere (fill entities.mood)
- feature: the query asks for features or play modes such as co-op (fill entities.features / entities.play_modes)
- hybrid: the query combines several of the above

Pick search_strategy from: semantic-search, similar-games, genre-search, feature-search, hybrid-search.
Give a confidence between 0 and 1 and a one-sentence reasoning.
"""


def fallback_classification(query: str) -> SearchIntent:
    """Rule-based classification used when the model path fails."""
    text = query.strip()

    similar = _SIMILAR_RE.search(text)
    if similar:
        reference = similar.group(1).strip(_FILLER_CHARS)
        if reference:
            return SearchIntent(
                type="similar",
                confidence=SIMILAR_CONFIDENCE,
                entities=IntentEntities(reference_game=reference),
                search_strategy="similar-games",
            )

    play_modes = [mode for pattern, mode in _PLAY_MODE_PATTERNS if pattern.search(text)]
    if play_modes:
        return SearchIntent(
            type="feature",
            confidence=FEATURE_CONFIDENCE,
            entities=IntentEntities(play_modes=play_modes),
            search_strategy="feature-search",
        )

    lowered = text.lower()
    genres = [kw for kw in GENRE_KEYWORDS if re.search(rf"\b{kw}s?\b", lowered)]
    if genres:
        return SearchIntent(
            type="genre",
            confidence=GENRE_CONFIDENCE,
            entities=IntentEntities(genres=genres),
            search_strategy="genre-search",
        )

    return SearchIntent(
        type="semantic",
        confidence=SEMANTIC_CONFIDENCE,
        entities=IntentEntities(),
        search_strategy="semantic-search",
    )


class IntentClassifier:
    def __init__(self, cache: SearchCache, generator: Generator | None = None) -> None:
        self.cache = cache
        self.generator = generator

    async def classify(self, query: str) -> SearchIntent:
        cache_key = f"{INTENT_CACHE_PREFIX}{query.strip().lower()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        intent = await self._classify_uncached(query)
        self.cache.set(cache_key, intent, INTENT_TTL_SECONDS)
        logger.debug(
            f"[Intent] '{query}' -> {intent.type} ({intent.confidence:.2f}) via {intent.search_strategy}"
        )
        return intent

    async def _classify_uncached(self, query: str) -> SearchIntent:
        if self.generator is None:
            return fallback_classification(query)
        try:
            return await self.generator.generate_structured(
                SearchIntent,
                CLASSIFIER_SYSTEM_PROMPT,
                f'Classify this search query: "{query}"',
                temperature=0.0,
            )
        except Exception as exc:
            logger.warning(f"[Intent] Classification failed, using rules: {exc}")
            return fallback_classification(query)

    def clear_cache(self) -> int:
        return self.cache.delete_prefix(INTENT_CACHE_PREFIX)
