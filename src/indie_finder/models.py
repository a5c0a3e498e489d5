from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, Field

from .corpus.base import GameRecord

IntentType: TypeAlias = Literal["semantic", "similar", "genre", "mood", "feature", "hybrid"]
StrategyName: TypeAlias = Literal[
    "semantic-search",
    "similar-games",
    "genre-search",
    "feature-search",
    "hybrid-search",
]


class IntentEntities(BaseModel):
    """Entities extracted from the query. Advisory: any of them may be empty."""

    reference_game: str | None = Field(
        default=None, description="The game the user is referring to"
    )
    genres: list[str] = Field(
        default_factory=list, description="The genres the user is referring to"
    )
    features: list[str] = Field(
        default_factory=list, description="The features the user is referring to"
    )
    mood: str | None = Field(default=None, description="The mood the user is referring to")
    play_modes: list[str] = Field(
        default_factory=list, description="The play modes the user is referring to"
    )

    def signal_count(self) -> int:
        """Number of entity fields that carry a value."""
        values: list[Any] = [
            self.reference_game,
            self.genres,
            self.features,
            self.mood,
            self.play_modes,
        ]
        return sum(1 for value in values if value)


class SearchIntent(BaseModel):
    """Classified purpose of a user query"""

    type: IntentType = Field(description="The kind of search the user wants")
    confidence: float = Field(
        ge=0.0, le=1.0, description="The confidence in the classification"
    )
    entities: IntentEntities = Field(default_factory=IntentEntities)
    search_strategy: str = Field(
        description=(
            "The search strategy to use: semantic-search, similar-games, "
            "genre-search, feature-search or hybrid-search"
        )
    )
    reasoning: str | None = Field(
        default=None, description="The reasoning for the classification"
    )


class PriceRange(BaseModel):
    min: float
    max: float


class YearRange(BaseModel):
    min: int
    max: int


class UserPreferences(BaseModel):
    """Reserved for personalization; strategies do not read it yet."""

    preferred_genres: list[str] = Field(default_factory=list)
    excluded_genres: list[str] = Field(default_factory=list)
    price_range: PriceRange | None = None
    release_year_range: YearRange | None = None


@dataclass(frozen=True)
class SearchContext:
    query: str
    intent: SearchIntent
    user_id: str | None = None
    preferences: UserPreferences | None = None


@dataclass(frozen=True)
class ScoredGame:
    """A game annotated with its score for one query."""

    game: GameRecord
    similarity: float
    relevance: float | None = None

    @property
    def key(self) -> str:
        return self.game.app_id if self.game.app_id else self.game.title.lower()

    def with_similarity(self, similarity: float) -> ScoredGame:
        return replace(self, similarity=similarity)

    def with_relevance(self, relevance: float) -> ScoredGame:
        return replace(self, relevance=relevance)


class ReferenceGame(BaseModel):
    name: str
    steam_url: str
    is_indie: bool = True


class SearchMetadata(BaseModel):
    query: str
    intent: SearchIntent
    search_type: str
    strategy: str
    processing_time_ms: float
    result_count: int
    cache_hit: bool = False


class SearchResponse(BaseModel):
    results: list[ScoredGame] = Field(default_factory=list)
    metadata: SearchMetadata
    reference_game: ReferenceGame | None = None
    suggestions: list[str] | None = None

    def as_cache_hit(self) -> SearchResponse:
        return self.model_copy(
            update={"metadata": self.metadata.model_copy(update={"cache_hit": True})}
        )

    def to_public_dict(self) -> dict[str, Any]:
        """JSON-ready payload without embedding vectors."""
        payload = self.model_dump(mode="json")
        for result in payload["results"]:
            result["game"].pop("embedding", None)
        return payload
