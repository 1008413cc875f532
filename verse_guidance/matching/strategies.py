"""
Resolution Strategies.

When the candidate queries for a goal return nothing, the engine walks an
ordered chain of strategies and returns the first non-empty result:

1. DirectSearchStrategy: search the raw goal text once more
2. ThematicFallbackStrategy: passages of the classified theme's collection
3. AlternateThemeStrategy: collections of the alternate themes in order

Pattern: Chain of Responsibility
- Each strategy is (goal, theme) -> list[MatchResult]
- A remote failure inside a strategy passes control to the next one
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Final, Protocol, runtime_checkable

from verse_guidance.clients.verse_source import VerseSourceError, VerseSourceProtocol
from verse_guidance.core.logging import get_logger
from verse_guidance.matching.conversion import PassageConverter
from verse_guidance.matching.guidance import build_match_result
from verse_guidance.matching.models import MatchResult, ThematicCollection
from verse_guidance.matching.scorer import calculate_relevance_score
from verse_guidance.matching.themes import ThemeCatalog

logger = get_logger(__name__)

DIRECT_SEARCH_LIMIT: Final[int] = 1
THEMATIC_MATCH_LIMIT: Final[int] = 2

CollectionProvider = Callable[[str], Awaitable[ThematicCollection | None]]


# =============================================================================
# Protocol Definition
# =============================================================================


@runtime_checkable
class ResolutionStrategy(Protocol):
    """One step of the zero-result fallback chain."""

    name: str

    async def resolve(self, goal: str, theme: str) -> list[MatchResult]:
        """Return matches for the goal, or [] to pass to the next strategy."""
        ...


# =============================================================================
# Strategies
# =============================================================================


class DirectSearchStrategy:
    """Searches the raw goal text and wraps the top hit under the default theme."""

    name = "direct_search"

    def __init__(
        self,
        source: VerseSourceProtocol,
        catalog: ThemeCatalog,
        converter: PassageConverter,
        language: str = "en",
    ) -> None:
        self._source = source
        self._catalog = catalog
        self._converter = converter
        self._language = language

    async def resolve(self, goal: str, theme: str) -> list[MatchResult]:
        raw_matches = await self._source.search_passages(goal, self._language)

        profile = self._catalog.default_profile
        results: list[MatchResult] = []
        for raw in raw_matches[:DIRECT_SEARCH_LIMIT]:
            passage = self._converter.from_match(
                raw, theme=profile.name, context=f"Direct search for: {goal}"
            )
            if passage is None:
                continue
            score = calculate_relevance_score(
                goal, raw.translation, self._catalog.semantic_expansions
            )
            results.append(build_match_result(profile, passage, goal, score))
        return results


class ThematicFallbackStrategy:
    """Takes the first passages of a theme's thematic collection."""

    name = "thematic_fallback"

    def __init__(
        self,
        collections: CollectionProvider,
        catalog: ThemeCatalog,
        limit: int = THEMATIC_MATCH_LIMIT,
    ) -> None:
        self._collections = collections
        self._catalog = catalog
        self._limit = limit

    async def resolve(self, goal: str, theme: str) -> list[MatchResult]:
        collection = await self._collections(theme)
        if collection is None or not collection.passages:
            return []

        profile = self._catalog.get(theme)
        expansions = self._catalog.semantic_expansions
        return [
            build_match_result(
                profile,
                passage,
                goal,
                calculate_relevance_score(goal, passage, expansions),
            )
            for passage in collection.passages[: self._limit]
        ]


class AlternateThemeStrategy:
    """Tries the thematic fallback for each alternate theme, skipping the classified one."""

    name = "alternate_themes"

    def __init__(self, thematic: ThematicFallbackStrategy, alternates: Sequence[str]) -> None:
        self._thematic = thematic
        self._alternates = tuple(alternates)

    async def resolve(self, goal: str, theme: str) -> list[MatchResult]:
        for alternate in self._alternates:
            if alternate == theme:
                continue
            results = await self._thematic.resolve(goal, alternate)
            if results:
                logger.info("alternate_theme_used", theme=theme, alternate=alternate)
                return results
        return []


# =============================================================================
# Chain Runner
# =============================================================================


async def resolve_chain(
    strategies: Sequence[ResolutionStrategy], goal: str, theme: str
) -> list[MatchResult]:
    """Run strategies in order until one returns matches.

    Args:
        strategies: Ordered strategy chain
        goal: Goal text
        theme: Classified theme

    Returns:
        First non-empty result, or [] when every strategy comes up empty
    """
    for strategy in strategies:
        try:
            results = await strategy.resolve(goal, theme)
        except VerseSourceError as e:
            logger.warning(
                "resolution_strategy_failed",
                strategy=strategy.name,
                theme=theme,
                error=str(e),
                status_code=e.status_code,
            )
            continue
        if results:
            logger.info(
                "resolution_strategy_matched",
                strategy=strategy.name,
                theme=theme,
                count=len(results),
            )
            return results
    return []


def describe_scores(results: Sequence[MatchResult]) -> Mapping[int, float]:
    """Passage id -> score, for log context."""
    return {r.passage.id: round(r.relevance_score, 3) for r in results}
