"""
Tests for the Keyword Extractor.

- TestExtractKeywords: tokenization, normalization, length filter
- TestComposeGoalText: goal text convention
"""

from __future__ import annotations

import pytest

from verse_guidance.matching.keywords import compose_goal_text, extract_keywords


class TestExtractKeywords:
    """Tokenization rules."""

    def test_lowercases_and_keeps_order(self) -> None:
        """Tokens are lowercase and in input order."""
        assert extract_keywords("Build a daily Exercise habit") == [
            "build",
            "daily",
            "exercise",
            "habit",
        ]

    def test_strips_punctuation(self) -> None:
        """Non-alphanumerics are removed from each word."""
        assert extract_keywords("Pray, on-time! (five) times.") == ["pray", "ontime", "five", "times"]

    def test_drops_short_tokens(self) -> None:
        """Tokens of two characters or fewer are dropped after stripping."""
        assert extract_keywords("go to it a!! ok?? run") == ["run"]

    def test_keeps_digits_and_duplicates(self) -> None:
        """Digits are alphanumeric; duplicates are preserved."""
        assert extract_keywords("run 5km run 100 times") == ["run", "5km", "run", "100", "times"]

    def test_does_not_remove_stopwords(self) -> None:
        """Stopword filtering happens in the query builder, not here."""
        assert "the" in extract_keywords("read the book")

    @pytest.mark.parametrize("text", ["", None, "   ", "!! ?? ..", "a b c"])
    def test_empty_results(self, text: str | None) -> None:
        """Blank or token-free input yields no keywords."""
        assert extract_keywords(text) == []

    def test_non_ascii_letters_are_stripped(self) -> None:
        """Only ASCII letters and digits survive normalization."""
        assert extract_keywords("café naïve") == ["caf", "nave"]


class TestComposeGoalText:
    """Goal text convention used by the goal store."""

    def test_joins_fields(self) -> None:
        assert compose_goal_text("Run daily", "30 minutes", "fitness") == "Run daily 30 minutes fitness"

    def test_trims_missing_fields(self) -> None:
        assert compose_goal_text("Improve patience") == "Improve patience"
