"""
Tests for the Query Builder.

- TestQueryOrder: ordered construction steps
- TestQueryInvariants: non-empty, no duplicates, no blanks
- TestThemeTerms: canonical terms, goal-specific terms and boost phrases
"""

from __future__ import annotations

import random

import pytest

from verse_guidance.matching.keywords import extract_keywords
from verse_guidance.matching.query_builder import QueryBuilder
from verse_guidance.matching.themes import ThemeCatalog

EXERCISE_GOAL = "Build a daily exercise habit"


@pytest.fixture
def builder(catalog: ThemeCatalog, rng: random.Random) -> QueryBuilder:
    return QueryBuilder(catalog, rng)


def build(builder: QueryBuilder, goal: str, theme: str) -> list[str]:
    return builder.build(goal, extract_keywords(goal), theme)


class TestQueryOrder:
    """Most specific queries come first."""

    def test_raw_goal_first(self, builder: QueryBuilder) -> None:
        assert build(builder, EXERCISE_GOAL, "fitness")[0] == EXERCISE_GOAL

    def test_keyword_windows_and_theme_combinations(self, builder: QueryBuilder) -> None:
        queries = build(builder, EXERCISE_GOAL, "fitness")

        assert queries[1:11] == [
            "build daily exercise habit",
            "build daily exercise",
            "build daily",
            "build daily exercise fitness",
            "build daily fitness",
            "build",
            "build fitness",
            "daily",
            "daily fitness",
            "exercise",
        ]
        assert queries[11] == "exercise fitness"

    def test_stopwords_removed_from_windows(self, builder: QueryBuilder) -> None:
        queries = build(builder, "Pray with the family", "prayer")
        assert queries[1] == "pray family"
        assert "pray with the" not in queries

    def test_single_keyword_goal_searches_bare_keyword_next(self, builder: QueryBuilder) -> None:
        """Windows are added even when shorter than their size; repeats collapse."""
        queries = builder.build("Meditate", ["meditate"], "guidance")

        assert queries[:3] == ["Meditate", "meditate", "meditate guidance"]
        assert queries.count("meditate") == 1

    def test_goal_terms_follow_theme_terms(self, builder: QueryBuilder) -> None:
        queries = build(builder, EXERCISE_GOAL, "fitness")
        theme_terms = queries.index("strength power ability body")
        goal_terms = queries.index("strive effort persevere strong strength")
        assert theme_terms < goal_terms
        assert queries[theme_terms + 1] == "strength power ability"
        assert queries[goal_terms + 1] == "strive effort persevere"

    def test_boost_phrases_last(self, builder: QueryBuilder) -> None:
        queries = build(builder, EXERCISE_GOAL, "fitness")
        # "strive effort persevere" already came from the goal-specific terms
        assert queries[-1] == "body strength health care trust"
        assert queries.count("strive effort persevere") == 1


class TestQueryInvariants:
    """Structural guarantees of every query list."""

    @pytest.mark.parametrize(
        ("goal", "theme"),
        [
            (EXERCISE_GOAL, "fitness"),
            ("Improve patience", "patience"),
            ("xyz qqq", "guidance"),
            ("", "guidance"),
            ("Pray on time", "prayer"),
        ],
    )
    def test_unique_non_blank_non_empty(
        self, builder: QueryBuilder, goal: str, theme: str
    ) -> None:
        queries = build(builder, goal, theme)

        assert queries
        assert len(queries) == len(set(queries))
        assert all(q.strip() == q and q for q in queries)

    def test_unmatched_goal_still_has_queries(self, builder: QueryBuilder) -> None:
        queries = build(builder, "xyz qqq", "guidance")
        assert queries[0] == "xyz qqq"
        assert "qqq guidance" in queries

    def test_exactly_one_guidance_phrase(
        self, builder: QueryBuilder, catalog: ThemeCatalog
    ) -> None:
        queries = build(builder, "xyz qqq", "guidance")
        phrases = [q for q in queries if q in catalog.guidance_phrases]
        assert len(phrases) == 1

    def test_phrase_choice_is_seeded(self, catalog: ThemeCatalog) -> None:
        first = QueryBuilder(catalog, random.Random(7)).build("xyz", ["xyz"], "guidance")
        second = QueryBuilder(catalog, random.Random(7)).build("xyz", ["xyz"], "guidance")
        assert first == second


class TestThemeTerms:
    """Per-theme vocabulary."""

    def test_default_theme_terms_skipped(
        self, builder: QueryBuilder, catalog: ThemeCatalog
    ) -> None:
        queries = build(builder, "xyz qqq", "guidance")
        assert catalog.get("guidance").search_terms not in queries
        assert "wisdom" not in queries

    def test_theme_term_words_each_added(self, builder: QueryBuilder) -> None:
        queries = build(builder, "Improve patience", "patience")
        for word in ("perseverance", "endurance"):
            assert word in queries

    def test_goal_trigger_without_theme(self, builder: QueryBuilder) -> None:
        """Goal-specific terms also apply when only a trigger word matches."""
        queries = build(builder, "Study every evening", "guidance")
        assert "knowledge wisdom understand learn reflect" in queries
        assert "knowledge" in queries

    @pytest.mark.parametrize(
        ("theme", "phrase"),
        [
            ("health", "strive effort persevere"),
            ("prayer", "remembrance dhikr"),
            ("family", "mercy compassion love"),
            ("success", "prosper triumph victory"),
        ],
    )
    def test_boost_phrases(self, builder: QueryBuilder, theme: str, phrase: str) -> None:
        assert phrase in build(builder, "xyz", theme)

    def test_no_boost_for_patience(self, builder: QueryBuilder) -> None:
        assert "remembrance dhikr" not in build(builder, "xyz", "patience")
