from __future__ import annotations

import re

from ...corpus import GameRecord
from ...models import ScoredGame, SearchContext, SearchIntent
from .base import SearchStrategy, rank_results


FEATURE_THRESHOLD = 0.2

MULTIPLAYER_FEATURES = {"coop", "co-op", "multiplayer", "multi-player"}
_MULTIPLAYER_MODES = {"coop", "multiplayer"}


def _normalize_mode(value: str) -> str:
    return re.sub(r"[\s\-_]", "", value.lower())


def play_mode_match(requested: str, record_mode: str) -> bool:
    """Substring match in either direction, ignoring case, spaces and hyphens."""
    a, b = _normalize_mode(requested), _normalize_mode(record_mode)
    if not a or not b:
        return False
    return a in b or b in a


def matches_features(game: GameRecord, play_modes: list[str], features: list[str]) -> bool:
    """Feature eligibility.

    - requested play modes: at least one must match a record play mode, and a
      match settles eligibility on its own;
    - requested features only: a co-op/multiplayer-like feature is satisfied
      by a co-op or multi-player record mode, any other feature by a tag match.
    """
    if game.metadata is None:
        return False
    record_modes = game.metadata.play_modes

    if play_modes:
        return any(
            play_mode_match(mode, record_mode)
            for mode in play_modes
            for record_mode in record_modes
        )

    wanted = [f.strip().lower() for f in features if f.strip()]
    if not wanted:
        return True

    multiplayer_ok = any(f in MULTIPLAYER_FEATURES for f in wanted) and any(
        _normalize_mode(mode) in _MULTIPLAYER_MODES for mode in record_modes
    )
    tags = [tag.lower() for tag in game.metadata.tags if tag]
    tag_ok = any(f in tag or tag in f for f in wanted for tag in tags)
    return multiplayer_ok or tag_ok


class FeatureSearchStrategy(SearchStrategy):
    """Embedding search restricted to games offering the requested features."""

    name = "feature-search"

    def can_handle(self, intent: SearchIntent) -> bool:
        return intent.type == "feature" and self.has_signal(intent)

    def has_signal(self, intent: SearchIntent) -> bool:
        return bool(intent.entities.features or intent.entities.play_modes)

    async def execute(self, context: SearchContext) -> list[ScoredGame]:
        entities = context.intent.entities
        query_embedding = await self.embedder.embed_query(context.query)
        games = await self.loader.load_ready_games()

        eligible = [
            game
            for game in games
            if matches_features(game, entities.play_modes, entities.features)
        ]
        scores = self.score_all(
            query_embedding, [game.embedding for game in eligible], FEATURE_THRESHOLD
        )

        candidates: list[ScoredGame] = []
        for game, similarity in zip(eligible, scores):
            if similarity is None:
                continue
            candidates.append(ScoredGame(game=game, similarity=similarity))

        return rank_results(candidates)
