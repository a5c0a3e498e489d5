from __future__ import annotations

from ...models import ScoredGame, SearchContext, SearchIntent
from .base import SearchStrategy, rank_results


SIMILAR_THRESHOLD = 0.2


def is_same_title(title: str, reference: str) -> bool:
    """Case-insensitive substring match in either direction."""
    a, b = title.lower(), reference.lower()
    if not a or not b:
        return False
    return a in b or b in a


class SimilarGamesStrategy(SearchStrategy):
    """Games near a named reference game, excluding the reference itself."""

    name = "similar-games"

    def can_handle(self, intent: SearchIntent) -> bool:
        return intent.type == "similar" and self.has_signal(intent)

    def has_signal(self, intent: SearchIntent) -> bool:
        return bool(intent.entities.reference_game)

    async def execute(self, context: SearchContext) -> list[ScoredGame]:
        reference = context.intent.entities.reference_game
        if not reference:
            raise ValueError("Reference game is required for similar games search")

        # Anchor on the name alone; the rest of the query is phrasing.
        reference_embedding = await self.embedder.embed_query(reference)
        games = await self.loader.load_ready_games()

        eligible = [game for game in games if not is_same_title(game.title, reference)]
        scores = self.score_all(
            reference_embedding, [game.embedding for game in eligible], SIMILAR_THRESHOLD
        )

        candidates: list[ScoredGame] = []
        for game, similarity in zip(eligible, scores):
            if similarity is None:
                continue
            candidates.append(ScoredGame(game=game, similarity=similarity))

        return rank_results(candidates)
