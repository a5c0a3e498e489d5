"""Tests for LLM relevance reranking."""

import re

import pytest

from indie_finder.models import ScoredGame
from indie_finder.search.reranker import RelevanceScores, Reranker, RerankError

from conftest import FakeGenerator, make_game


def candidates(*specs: tuple[str, float]) -> list[ScoredGame]:
    return [ScoredGame(make_game(app_id, f"Game {app_id}"), sim) for app_id, sim in specs]


def scores_by_title(table: dict[str, float]):
    """Score each listed game by the title in its line of the prompt."""

    def respond(prompt: str) -> RelevanceScores:
        titles = re.findall(r"^\d+\. (.+?) \|", prompt, re.MULTILINE)
        return RelevanceScores(scores=[table[t] for t in titles])

    return respond


@pytest.mark.asyncio
async def test_keeps_relevant_candidates_in_score_order() -> None:
    generator = FakeGenerator(
        structured={
            RelevanceScores: scores_by_title(
                {"Game 1": 0.3, "Game 2": 0.9, "Game 3": 0.4, "Game 4": 1.7}
            )
        }
    )
    reranked = await Reranker(generator).rerank(
        "cozy farming", candidates(("1", 0.9), ("2", 0.5), ("3", 0.8), ("4", 0.2))
    )

    assert [(r.game.app_id, r.relevance) for r in reranked] == [
        ("4", 1.0),
        ("2", 0.9),
        ("3", 0.4),
    ]


@pytest.mark.asyncio
async def test_ties_break_on_similarity_then_key() -> None:
    generator = FakeGenerator(
        structured={RelevanceScores: scores_by_title({"Game a": 0.8, "Game b": 0.8, "Game c": 0.8})}
    )
    reranked = await Reranker(generator).rerank(
        "query", candidates(("c", 0.5), ("b", 0.5), ("a", 0.4))
    )
    assert [r.game.app_id for r in reranked] == ["b", "c", "a"]


@pytest.mark.asyncio
async def test_only_uncached_candidates_are_sent() -> None:
    generator = FakeGenerator(
        structured={RelevanceScores: scores_by_title({"Game 1": 0.9, "Game 2": 0.8})}
    )
    reranker = Reranker(generator)

    await reranker.rerank("Space", candidates(("1", 0.9)))
    await reranker.rerank("space ", candidates(("1", 0.9), ("2", 0.8)))

    assert len(generator.calls) == 2
    second_prompt = generator.calls[1][1]
    assert "Game 2" in second_prompt
    assert "Game 1" not in second_prompt

    await reranker.rerank("space", candidates(("1", 0.9), ("2", 0.8)))
    assert len(generator.calls) == 2


@pytest.mark.asyncio
async def test_shortlist_and_output_are_capped() -> None:
    pool = candidates(*[(f"{i:02d}", 1.0 - i / 100) for i in range(50)])
    generator = FakeGenerator(
        structured={RelevanceScores: lambda prompt: RelevanceScores(scores=[0.9] * 40)}
    )
    reranked = await Reranker(generator).rerank("query", pool)

    assert len(reranked) == 20
    assert "Game 40" not in generator.calls[0][1]


@pytest.mark.asyncio
async def test_score_count_mismatch_raises() -> None:
    generator = FakeGenerator(structured={RelevanceScores: RelevanceScores(scores=[0.5])})
    with pytest.raises(RerankError):
        await Reranker(generator).rerank("query", candidates(("1", 0.9), ("2", 0.8)))


@pytest.mark.asyncio
async def test_model_failure_raises() -> None:
    with pytest.raises(RerankError):
        await Reranker(FakeGenerator(fail=True)).rerank("query", candidates(("1", 0.9)))
