from __future__ import annotations

from typing import Any

import pytest
from google.genai.types import (
    HttpOptions,
    Content,
    GenerateContentResponse,
    Candidate,
    Part,
)
from pydantic import BaseModel

from indie_finder.cache import SearchCache
from indie_finder.corpus import (
    CorpusLoader,
    DiscoveryRecord,
    DiscoverySource,
    GameRecord,
    InMemoryCorpus,
    StructuredMetadata,
)
from indie_finder.models import IntentEntities, SearchContext, SearchIntent


# ---------------------------------------------------------------------------
# GenAI client mocks
# ---------------------------------------------------------------------------


class MockModels:
    def __init__(self, text: str | None) -> None:
        self.text = text
        self.calls: list[dict[str, Any]] = []

    async def generate_content(self, *args, **kwargs) -> GenerateContentResponse:
        self.calls.append(kwargs)
        parts = [Part.from_text(text=self.text)] if self.text is not None else []
        return GenerateContentResponse(
            candidates=[Candidate(content=Content(role="model", parts=parts))]
        )


class MockAio:
    def __init__(self, models: MockModels) -> None:
        self._models = models

    @property
    def models(self) -> MockModels:
        return self._models


class MockGenAIClient:
    def __init__(
        self,
        api_key: str | None = None,
        http_options: HttpOptions | None = None,
        *,
        text: str | None = "ok",
    ) -> None:
        self.models = MockModels(text)

    @property
    def aio(self) -> MockAio:
        return MockAio(self.models)


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeEmbedder:
    """Looks texts up in a table; unknown texts get the default vector."""

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        default: list[float] | None = None,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.calls: list[str] = []

    async def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        return list(self.vectors.get(text, self.default))


class FakeGenerator:
    """Returns scripted text and structured outputs, or raises when told to."""

    def __init__(
        self,
        *,
        text: str = "",
        structured: dict[type[BaseModel], Any] | None = None,
        fail: bool = False,
    ) -> None:
        self.text = text
        self.structured = structured or {}
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def generate(
        self, system_prompt: str, user_prompt: str, *, temperature: float = 0.0
    ) -> str:
        self.calls.append(("text", user_prompt))
        if self.fail:
            raise RuntimeError("model unavailable")
        return self.text

    async def generate_structured(
        self,
        schema: type[BaseModel],
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.0,
    ) -> Any:
        self.calls.append((schema.__name__, user_prompt))
        if self.fail:
            raise RuntimeError("model unavailable")
        value = self.structured[schema]
        return value(user_prompt) if callable(value) else value


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def make_game(
    app_id: str,
    title: str,
    *,
    tags: list[str] | None = None,
    play_modes: list[str] | None = None,
    embedding: list[float] | None = None,
    with_metadata: bool = True,
) -> GameRecord:
    tags = tags or []
    metadata = (
        StructuredMetadata(tags=tags, play_modes=play_modes or [])
        if with_metadata
        else None
    )
    return GameRecord(
        app_id=app_id,
        title=title,
        description=f"{title} description",
        tags=tags,
        metadata=metadata,
        embedding=embedding,
    )


def make_discovery(
    discovery_id: str, games: list[GameRecord], embedding: list[float] | None
) -> DiscoveryRecord:
    return DiscoveryRecord(
        source=DiscoverySource(id=discovery_id, author="dev"),
        games=games,
        embedding=embedding,
    )


def make_intent(
    type: str = "semantic",
    confidence: float = 0.9,
    strategy: str = "semantic-search",
    **entities: Any,
) -> SearchIntent:
    return SearchIntent(
        type=type,
        confidence=confidence,
        entities=IntentEntities(**entities),
        search_strategy=strategy,
    )


def make_context(query: str, intent: SearchIntent) -> SearchContext:
    return SearchContext(query=query, intent=intent)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> SearchCache:
    return SearchCache(clock=clock)


def make_loader(
    cache: SearchCache,
    games: list[GameRecord] | None = None,
    discoveries: list[DiscoveryRecord] | None = None,
) -> CorpusLoader:
    return CorpusLoader(InMemoryCorpus(games, discoveries), cache)
