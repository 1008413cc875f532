"""
Theme Classifier.

Scores every registered theme against goal keywords and picks the winner.

Scoring per theme:
- +1.0 for each keyword present in the theme's synonym table
- +0.5 for each keyword found inside any of the theme's guidance strings

The default theme is never scored. It is returned only when every theme
scores zero. Ties go to the theme registered first.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from verse_guidance.core.logging import get_logger
from verse_guidance.matching.themes import ThemeCatalog, ThemeProfile

logger = get_logger(__name__)

SYNONYM_WEIGHT: Final[float] = 1.0
GUIDANCE_WEIGHT: Final[float] = 0.5


class ThemeClassifier:
    """Rule-based keyword to theme classifier.

    Usage:
        classifier = ThemeClassifier(catalog)
        classifier.classify(["daily", "exercise"])  # "fitness"
    """

    def __init__(self, catalog: ThemeCatalog) -> None:
        self._catalog = catalog
        self._lowered_guidance: dict[str, tuple[str, ...]] = {
            profile.name: tuple(g.lower() for g in profile.practical_guidance)
            for profile in catalog.scorable_themes
        }

    def score(self, keywords: Sequence[str]) -> dict[str, float]:
        """Score every scorable theme, in registration order."""
        return {
            profile.name: self._score_theme(profile, keywords)
            for profile in self._catalog.scorable_themes
        }

    def _score_theme(self, profile: ThemeProfile, keywords: Sequence[str]) -> float:
        guidance = self._lowered_guidance[profile.name]
        total = 0.0
        for keyword in keywords:
            if keyword in profile.synonyms:
                total += SYNONYM_WEIGHT
            if any(keyword in item for item in guidance):
                total += GUIDANCE_WEIGHT
        return total

    def classify(self, keywords: Sequence[str]) -> str:
        """Return the best-scoring theme, or the default theme when all are zero.

        Args:
            keywords: Tokens from extract_keywords()

        Returns:
            Theme name
        """
        scores = self.score(keywords)

        best_theme = self._catalog.default_theme
        best_score = 0.0
        # Strict > keeps the earliest registered theme on ties
        for theme, value in scores.items():
            if value > best_score:
                best_theme, best_score = theme, value

        logger.debug(
            "theme_classified",
            theme=best_theme,
            score=best_score,
            keywords=list(keywords),
        )
        return best_theme
