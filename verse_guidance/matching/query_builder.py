"""
Query Builder.

Produces the ordered, duplicate-free list of search strings tried against
the remote verse source for one goal, from most specific to most generic:

1. The raw goal text
2. Stopword-filtered keyword windows (first 4, 3, 2)
3. First 3 / first 2 keywords plus the theme name
4. Each of the first 3 keywords, alone and with the theme name
5. The theme's canonical search terms and their first words
6. Goal-specific domain vocabulary and its first words
7. One generic guidance phrase chosen at random
8. The theme's boost phrases
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from typing import Final

from verse_guidance.matching.themes import ThemeCatalog

WINDOW_SIZES: Final[tuple[int, ...]] = (4, 3, 2)
LEADING_WORDS: Final[int] = 3


class QueryBuilder:
    """Builds candidate search queries for a goal.

    Attributes:
        catalog: Theme catalog providing stopwords and term tables
    """

    def __init__(self, catalog: ThemeCatalog, rng: random.Random | None = None) -> None:
        self.catalog = catalog
        self._rng = rng or random.Random()

    def build(self, goal: str, keywords: Sequence[str], theme: str) -> list[str]:
        """Build the candidate query list.

        Args:
            goal: Raw goal text
            keywords: Tokens from extract_keywords(goal)
            theme: Classified theme name

        Returns:
            Non-blank queries, first occurrence order, no duplicates
        """
        candidates: list[str] = [goal]

        meaningful = [k for k in keywords if k not in self.catalog.stopwords]
        if meaningful:
            # Short goals repeat the same window; _dedupe collapses them
            for size in WINDOW_SIZES:
                candidates.append(" ".join(meaningful[:size]))
            candidates.append(f"{' '.join(meaningful[:3])} {theme}")
            candidates.append(f"{' '.join(meaningful[:2])} {theme}")
            for word in meaningful[:3]:
                candidates.append(word)
                candidates.append(f"{word} {theme}")

        if theme != self.catalog.default_theme:
            candidates.extend(_expand_terms(self.catalog.get(theme).search_terms))

        goal_terms = self.catalog.goal_specific_terms(goal, theme)
        if goal_terms:
            candidates.extend(_expand_terms(goal_terms))

        if self.catalog.guidance_phrases:
            candidates.append(self._rng.choice(self.catalog.guidance_phrases))

        candidates.extend(self.catalog.get(theme).boost_phrases)

        return _dedupe(candidates)


def _expand_terms(terms: str) -> list[str]:
    """Full phrase, its first three words joined, then each of those words."""
    words = terms.split()[:LEADING_WORDS]
    return [terms, " ".join(words), *words]


def _dedupe(candidates: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    queries: list[str] = []
    for candidate in candidates:
        query = candidate.strip()
        if query and query not in seen:
            seen.add(query)
            queries.append(query)
    return queries
