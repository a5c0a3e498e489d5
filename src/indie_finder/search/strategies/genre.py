from __future__ import annotations

from ...corpus import GameRecord
from ...models import ScoredGame, SearchContext, SearchIntent
from .base import SearchStrategy, rank_results


GENRE_THRESHOLD = 0.15
GENRE_MATCH_BOOST = 0.1
MAX_GENRE_BOOST = 0.3

GENRE_SYNONYMS: dict[str, list[str]] = {
    "roguelike": ["rogue-like", "roguelite", "rogue-lite"],
    "platformer": ["platform", "metroidvania"],
    "rpg": ["role-playing", "roleplaying"],
    "strategy": ["tactical", "rts", "turn-based"],
    "puzzle": ["brain teaser", "logic"],
    "shooter": ["fps", "third-person shooter", "bullet hell"],
    "racing": ["driving", "car"],
    "simulation": ["sim", "simulator"],
    "adventure": ["exploration"],
    "action": ["arcade"],
}


def is_genre_match(game_tag: str, requested_genre: str) -> bool:
    """Match a lower-cased tag against a lower-cased requested genre."""
    if game_tag in requested_genre or requested_genre in game_tag:
        return True

    if any(synonym in game_tag for synonym in GENRE_SYNONYMS.get(requested_genre, [])):
        return True

    # The tag names a canonical genre that the request is a synonym of.
    for genre, synonyms in GENRE_SYNONYMS.items():
        if genre in game_tag and requested_genre in synonyms:
            return True

    return False


def genre_matches(game: GameRecord, genres: list[str]) -> int:
    """Count (requested genre, tag) pairs that match."""
    if game.metadata is None:
        return 0
    tags = [tag.lower() for tag in game.metadata.tags]
    return sum(
        1
        for requested in (g.lower() for g in genres)
        for tag in tags
        if is_genre_match(tag, requested)
    )


class GenreSearchStrategy(SearchStrategy):
    """Embedding search restricted to games tagged with a requested genre."""

    name = "genre-search"

    def can_handle(self, intent: SearchIntent) -> bool:
        return intent.type == "genre" and self.has_signal(intent)

    def has_signal(self, intent: SearchIntent) -> bool:
        return bool(intent.entities.genres)

    async def execute(self, context: SearchContext) -> list[ScoredGame]:
        genres = context.intent.entities.genres
        query_embedding = await self.embedder.embed_query(context.query)
        games = await self.loader.load_ready_games()

        matched = [(game, genre_matches(game, genres)) for game in games]
        eligible = [(game, matches) for game, matches in matched if matches > 0]
        scores = self.score_all(
            query_embedding, [game.embedding for game, _ in eligible], GENRE_THRESHOLD
        )

        candidates: list[ScoredGame] = []
        for (game, matches), similarity in zip(eligible, scores):
            if similarity is None:
                continue
            boost = min(MAX_GENRE_BOOST, matches * GENRE_MATCH_BOOST)
            candidates.append(ScoredGame(game=game, similarity=min(1.0, similarity + boost)))

        return rank_results(candidates)
