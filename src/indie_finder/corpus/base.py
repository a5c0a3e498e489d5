"""
Corpus interfaces and record types consumed by the search core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class StructuredMetadata:
    """Filterable attributes derived from the game's Steam profile."""

    tags: list[str] = field(default_factory=list)
    play_modes: list[str] = field(default_factory=list)
    price: str = "N/A"
    is_free: bool = False
    release_status: str = "Released"


@dataclass(frozen=True)
class DiscoverySource:
    """The social post a game was discovered through."""

    id: str
    author: str
    text: str = ""
    url: str = ""


@dataclass(frozen=True)
class GameRecord:
    """A retrievable game. Read-only from the search core's perspective."""

    app_id: str
    title: str
    description: str = ""
    price: str = "N/A"
    tags: list[str] = field(default_factory=list)
    release_date: str = ""
    developer: str = ""
    publisher: str = ""
    images: list[str] = field(default_factory=list)
    metadata: StructuredMetadata | None = None
    embedding: list[float] | None = field(default=None, repr=False)
    semantic_description: str = ""
    source: DiscoverySource | None = None

    @property
    def store_url(self) -> str:
        return f"https://store.steampowered.com/app/{self.app_id}"


@dataclass(frozen=True)
class DiscoveryRecord:
    """A discovery post with its own embedding and the games it links to."""

    source: DiscoverySource
    games: list[GameRecord] = field(default_factory=list)
    embedding: list[float] | None = field(default=None, repr=False)


class CorpusBackend(Protocol):
    """Read-only access to the two corpus views."""

    def load_ready_games(self) -> list[GameRecord]:
        """Return games whose enrichment has completed, keyed by Steam app id."""

    def load_embedded_corpus(self) -> list[DiscoveryRecord]:
        """Return embedded discovery posts with their linked games."""


class InMemoryCorpus:
    """Corpus backend over records already held in memory."""

    def __init__(
        self,
        games: list[GameRecord] | None = None,
        discoveries: list[DiscoveryRecord] | None = None,
    ) -> None:
        self.games = list(games or [])
        self.discoveries = list(discoveries or [])

    def load_ready_games(self) -> list[GameRecord]:
        return list(self.games)

    def load_embedded_corpus(self) -> list[DiscoveryRecord]:
        return list(self.discoveries)
