"""
Relevance Scorer.

Heuristic keyword-overlap score between a goal and a passage:

    exact    1.0 per goal token present verbatim in the passage
    partial  0.7 per goal token only substring-matching a passage token
    semantic 0.5 per goal token whose expansion words match a passage token

The total is normalized by the goal token count and capped at 0.95.
Pure and deterministic.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final

from verse_guidance.matching.keywords import extract_keywords
from verse_guidance.matching.models import Passage

EXACT_WEIGHT: Final[float] = 1.0
PARTIAL_WEIGHT: Final[float] = 0.7
SEMANTIC_WEIGHT: Final[float] = 0.5
MAX_SCORE: Final[float] = 0.95


def passage_text(passage: Passage | str) -> str:
    """Text scored for a passage: translation plus reflection."""
    if isinstance(passage, Passage):
        return f"{passage.text_translated} {passage.reflection}"
    return passage


def _overlaps(a: str, b: str) -> bool:
    return a in b or b in a


def calculate_relevance_score(
    goal_text: str,
    passage: Passage | str,
    semantic_expansions: Mapping[str, Sequence[str]] | None = None,
) -> float:
    """Score how well a passage matches a goal.

    Args:
        goal_text: Goal text as entered by the user
        passage: A Passage, or raw translated text
        semantic_expansions: Goal word -> related words table

    Returns:
        Score in [0, 0.95]
    """
    goal_tokens = extract_keywords(goal_text)
    passage_tokens = extract_keywords(passage_text(passage))
    if not goal_tokens or not passage_tokens:
        return 0.0

    passage_set = set(passage_tokens)
    expansions = semantic_expansions or {}

    exact = sum(1 for token in goal_tokens if token in passage_set)
    partial = sum(
        1
        for token in goal_tokens
        if any(_overlaps(token, other) for other in passage_set)
    )

    semantic = 0
    for token in goal_tokens:
        related = expansions.get(token)
        if not related:
            continue
        if any(_overlaps(word, other) for word in related for other in passage_set):
            semantic += 1

    total = (
        exact * EXACT_WEIGHT
        + (partial - exact) * PARTIAL_WEIGHT
        + semantic * SEMANTIC_WEIGHT
    )
    return min(MAX_SCORE, total / max(1, len(goal_tokens)))
