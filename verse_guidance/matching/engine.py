"""
Verse Guidance Engine.

Matches user goals to thematically relevant passages:

    goal -> keywords -> theme -> candidate queries -> remote search
         -> relevance ranking -> MatchResult assembly

Zero search results fall through an ordered resolution chain (direct goal
search, thematic fallback, alternate themes). Thematic collections are
cached with a TTL. Every public operation is wrapped in a tracing span and
never raises: failures are logged and an empty/None result is returned.

Load-more keeps a per-goal session of passages already shown so repeated
calls never return the same passage twice. Sessions are evicted least
recently used first once MAX_SESSIONS goals are tracked.
"""

from __future__ import annotations

import random
import time
from collections import OrderedDict
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Final

from verse_guidance.clients.models import RawMatch
from verse_guidance.clients.verse_source import (
    DEFAULT_LANGUAGE,
    VerseSourceError,
    VerseSourceProtocol,
)
from verse_guidance.core.logging import get_logger
from verse_guidance.core.tracing import get_tracer
from verse_guidance.matching.cache import DEFAULT_TTL_SECONDS, TTLCache
from verse_guidance.matching.classifier import ThemeClassifier
from verse_guidance.matching.conversion import PassageConverter
from verse_guidance.matching.fallback import ThematicFallbackStore
from verse_guidance.matching.guidance import (
    build_match_result,
    generate_personalized_guidance,
    personalize_life_application,
)
from verse_guidance.matching.keywords import extract_keywords
from verse_guidance.matching.models import MatchResult, Passage, ThematicCollection
from verse_guidance.matching.query_builder import QueryBuilder
from verse_guidance.matching.scorer import calculate_relevance_score
from verse_guidance.matching.strategies import (
    AlternateThemeStrategy,
    DirectSearchStrategy,
    ResolutionStrategy,
    ThematicFallbackStrategy,
    describe_scores,
    resolve_chain,
)
from verse_guidance.matching.themes import ThemeCatalog, ThemeProfile

logger = get_logger(__name__)
tracer = get_tracer(__name__)

# =============================================================================
# Constants
# =============================================================================

INITIAL_MATCH_THRESHOLD: Final[int] = 5
ADDITIONAL_MATCH_THRESHOLD: Final[int] = 10
INITIAL_RESULT_COUNT: Final[int] = 1
LOAD_MORE_PAGE_SIZE: Final[int] = 3
COLLECTION_SIZE: Final[int] = 5
MAX_SESSIONS: Final[int] = 1024


# =============================================================================
# Session State
# =============================================================================


@dataclass(slots=True)
class GoalSession:
    """Passages already returned for one goal."""

    ids: set[int] = field(default_factory=set)
    coordinates: set[tuple[int, int]] = field(default_factory=set)

    def has_seen(self, passage: Passage) -> bool:
        return passage.id in self.ids or passage.coordinates in self.coordinates

    def record(self, results: Sequence[MatchResult]) -> None:
        for result in results:
            self.ids.add(result.passage.id)
            self.coordinates.add(result.passage.coordinates)


# =============================================================================
# Engine
# =============================================================================


class VerseGuidanceEngine:
    """Goal to passage matching engine.

    All collaborators are injectable: the remote source, the theme catalog,
    the random source (templates, guidance phrase, fallback shuffle) and the
    clock used for cache expiry.

    Example:
        async with AlQuranCloudClient() as source:
            engine = VerseGuidanceEngine(source)
            results = await engine.find_passages_for_goal("Improve patience")
    """

    def __init__(
        self,
        source: VerseSourceProtocol,
        catalog: ThemeCatalog | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        cache_ttl: float = DEFAULT_TTL_SECONDS,
        language: str = DEFAULT_LANGUAGE,
        initial_threshold: int = INITIAL_MATCH_THRESHOLD,
        additional_threshold: int = ADDITIONAL_MATCH_THRESHOLD,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        """Initialize the engine.

        Args:
            source: Remote verse source
            catalog: Theme catalog (packaged themes.yaml if None)
            rng: Random source shared by every randomized choice
            clock: Returns the current time in seconds
            cache_ttl: Thematic collection cache lifetime in seconds
            language: Search language passed to the source
            initial_threshold: Stop searching once this many hits are merged
            additional_threshold: Same, for load-more
            max_sessions: Load-more sessions kept before the oldest is evicted
        """
        self._source = source
        self._catalog = catalog or ThemeCatalog()
        self._rng = rng or random.Random()
        self._clock = clock
        self._language = language
        self._initial_threshold = initial_threshold
        self._additional_threshold = additional_threshold
        self._max_sessions = max(1, max_sessions)

        self._classifier = ThemeClassifier(self._catalog)
        self._query_builder = QueryBuilder(self._catalog, self._rng)
        self._converter = PassageConverter(self._catalog, self._rng)
        self._fallback_store = ThematicFallbackStore(
            source, self._catalog, self._converter, self._rng
        )
        self._cache: TTLCache[ThematicCollection] = TTLCache(cache_ttl)
        self._sessions: OrderedDict[str, GoalSession] = OrderedDict()

        self._thematic_strategy = ThematicFallbackStrategy(
            self.get_thematic_collection, self._catalog
        )
        self._resolution_chain: tuple[ResolutionStrategy, ...] = (
            DirectSearchStrategy(source, self._catalog, self._converter, language),
            self._thematic_strategy,
            AlternateThemeStrategy(self._thematic_strategy, self._catalog.alternate_themes),
        )

    @property
    def catalog(self) -> ThemeCatalog:
        return self._catalog

    def _session(self, goal_text: str, reset: bool = False) -> GoalSession:
        """Session for a goal, marked most recently used."""
        session = self._sessions.pop(goal_text, None)
        if session is None or reset:
            session = GoalSession()
        self._sessions[goal_text] = session
        while len(self._sessions) > self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.debug("goal_session_evicted", goal=evicted)
        return session

    # -------------------------------------------------------------------------
    # Goal analysis
    # -------------------------------------------------------------------------

    def analyze_goal(self, goal: str) -> tuple[list[str], str]:
        """Extract keywords and classify the theme of a goal."""
        keywords = extract_keywords(goal)
        theme = self._classifier.classify(keywords)
        logger.info("goal_analysis", goal=goal, keywords=keywords, theme=theme)
        return keywords, theme

    async def _search_candidates(
        self, goal: str, keywords: Sequence[str], theme: str, threshold: int
    ) -> list[RawMatch]:
        """Query candidates in order, merging hits by id until threshold."""
        queries = self._query_builder.build(goal, keywords, theme)
        logger.debug("search_queries", goal=goal, queries=queries)

        aggregated: dict[int, RawMatch] = {}
        for query in queries:
            try:
                hits = await self._source.search_passages(query, self._language)
            except VerseSourceError as e:
                logger.warning(
                    "search_query_failed",
                    query=query,
                    error=str(e),
                    status_code=e.status_code,
                )
                continue

            for hit in hits:
                aggregated.setdefault(hit.number, hit)
            logger.debug("search_query_done", query=query, hits=len(hits), total=len(aggregated))
            if len(aggregated) >= threshold:
                break

        return list(aggregated.values())

    def _rank(self, goal: str, matches: Sequence[RawMatch]) -> list[tuple[float, RawMatch]]:
        """Score raw hits on their translated text; stable descending sort."""
        expansions = self._catalog.semantic_expansions
        scored = [
            (calculate_relevance_score(goal, m.translation, expansions), m) for m in matches
        ]
        return sorted(scored, key=lambda pair: pair[0], reverse=True)

    def _assemble(
        self,
        ranked: Sequence[tuple[float, RawMatch]],
        goal: str,
        theme: str,
        context: str,
    ) -> list[MatchResult]:
        profile = self._catalog.get(theme)
        results: list[MatchResult] = []
        for score, raw in ranked:
            passage = self._converter.from_match(raw, theme=theme, context=context)
            if passage is not None:
                results.append(build_match_result(profile, passage, goal, score))
        return results

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def find_passages_for_goal(self, goal_text: str) -> list[MatchResult]:
        """Find the best passage for a goal and start its load-more session.

        Args:
            goal_text: Goal text (see compose_goal_text)

        Returns:
            Top match, fallback matches, or [] when nothing is found
        """
        with tracer.start_as_current_span("find_passages_for_goal") as span:
            span.set_attribute("goal.length", len(goal_text))
            session = self._session(goal_text, reset=True)
            try:
                keywords, theme = self.analyze_goal(goal_text)
                span.set_attribute("goal.theme", theme)

                matches = await self._search_candidates(
                    goal_text, keywords, theme, self._initial_threshold
                )
                if matches:
                    ranked = self._rank(goal_text, matches)
                    results = self._assemble(
                        ranked[:INITIAL_RESULT_COUNT],
                        goal_text,
                        theme,
                        context=f"Guidance for: {goal_text}",
                    )
                else:
                    logger.info("no_search_results", goal=goal_text, theme=theme)
                    results = await resolve_chain(self._resolution_chain, goal_text, theme)
            except Exception as e:
                logger.exception("find_passages_failed", goal=goal_text, error=str(e))
                return []

            session.record(results)
            span.set_attribute("results.count", len(results))
            logger.info(
                "goal_matched",
                goal=goal_text,
                theme=theme,
                scores=describe_scores(results),
            )
            return results

    async def get_additional_passages_for_goal(
        self, goal_text: str, current_count: int = 1
    ) -> list[MatchResult]:
        """Load more passages for a goal, skipping any already shown.

        Args:
            goal_text: Goal text used for the initial lookup
            current_count: Number of results the caller already displays

        Returns:
            Up to three new matches
        """
        with tracer.start_as_current_span("get_additional_passages_for_goal") as span:
            span.set_attribute("goal.current_count", current_count)
            session = self._session(goal_text)
            start = max(0, current_count)
            try:
                keywords, theme = self.analyze_goal(goal_text)
                matches = await self._search_candidates(
                    goal_text, keywords, theme, self._additional_threshold
                )
                if matches:
                    ranked = self._rank(goal_text, matches)
                    candidates = self._assemble(
                        ranked[start : start + LOAD_MORE_PAGE_SIZE],
                        goal_text,
                        theme,
                        context=f"Additional guidance for: {goal_text}",
                    )
                else:
                    candidates = await self._thematic_strategy.resolve(goal_text, theme)
            except Exception as e:
                logger.exception("additional_passages_failed", goal=goal_text, error=str(e))
                return []

            results = [r for r in candidates if not session.has_seen(r.passage)]
            session.record(results)
            span.set_attribute("results.count", len(results))
            logger.info(
                "additional_passages",
                goal=goal_text,
                current_count=current_count,
                returned=len(results),
                skipped=len(candidates) - len(results),
            )
            return results

    async def get_thematic_collection(self, theme: str) -> ThematicCollection | None:
        """Up to five passages for a theme, cached for the configured TTL.

        Names outside the catalog resolve to the default theme and share its
        cache entry.

        Args:
            theme: Theme name (case-insensitive)

        Returns:
            ThematicCollection, or None on unexpected failure
        """
        with tracer.start_as_current_span("get_thematic_collection") as span:
            profile = self._catalog.get(theme)
            key = profile.name
            span.set_attribute("theme", key)

            cached = self._cache.get(key, self._clock())
            if cached is not None:
                span.set_attribute("cache.hit", True)
                return cached
            span.set_attribute("cache.hit", False)

            try:
                collection = await self._build_collection(profile)
            except Exception as e:
                logger.exception("thematic_collection_failed", theme=key, error=str(e))
                return None

            self._cache.put(key, collection, self._clock())
            return collection

    async def _build_collection(self, profile: ThemeProfile) -> ThematicCollection:
        theme = profile.name

        try:
            hits = await self._source.search_passages(profile.search_terms, self._language)
        except VerseSourceError as e:
            logger.warning("thematic_search_failed", theme=theme, error=str(e))
            hits = []

        passages: list[Passage] = []
        for raw in hits[:COLLECTION_SIZE]:
            passage = self._converter.from_match(
                raw, theme=theme, context=f"Thematic guidance: {theme}"
            )
            if passage is not None:
                passages.append(passage)

        if not passages:
            passages = await self._fallback_store.fetch(theme)

        logger.info(
            "thematic_collection_built",
            theme=theme,
            passages=len(passages),
            from_search=bool(hits),
        )
        return ThematicCollection(
            theme=theme.capitalize(),
            description=profile.description,
            passages=tuple(passages),
            practical_guidance=profile.practical_guidance,
            recommended_actions=profile.recommended_actions,
        )

    async def get_daily_passage(self) -> Passage | None:
        """A random passage, or the offline fallback passage on failure."""
        with tracer.start_as_current_span("get_daily_passage"):
            try:
                random_passage = await self._source.get_random_passage()
                passage = self._converter.from_passage(
                    random_passage.passage,
                    random_passage.collection,
                    theme=random_passage.theme,
                    context=random_passage.context,
                )
            except Exception as e:
                logger.warning("daily_passage_failed", error=str(e))
                return self._catalog.fallback_passage

            return passage or self._catalog.fallback_passage

    async def get_smart_recommendation(
        self, user_goals: Sequence[str], completed_habits: Sequence[str]
    ) -> Passage | None:
        """A random passage personalized to the user's goals and habits.

        The focus theme is classified from the goals and habits together;
        the passage's practical guidance is replaced with personalized tips
        and its life application is prefixed with the user's goals.

        Args:
            user_goals: Goal texts, most relevant first
            completed_habits: Recently completed habit names

        Returns:
            Personalized passage, or the offline fallback passage on failure
        """
        with tracer.start_as_current_span("get_smart_recommendation") as span:
            try:
                focus = self._classifier.classify(
                    extract_keywords(" ".join([*user_goals, *completed_habits]))
                )
                span.set_attribute("focus.theme", focus)

                random_passage = await self._source.get_random_passage()
                passage = self._converter.from_passage(
                    random_passage.passage,
                    random_passage.collection,
                    theme=focus,
                    context=random_passage.context,
                )
                if passage is None:
                    return self._catalog.fallback_passage

                profile = self._catalog.get(focus)
                recommendation = replace(
                    passage,
                    practical_guidance=generate_personalized_guidance(profile, user_goals),
                    life_application=personalize_life_application(
                        passage.life_application, user_goals
                    ),
                )
            except Exception as e:
                logger.warning("smart_recommendation_failed", error=str(e))
                return self._catalog.fallback_passage

            logger.info("smart_recommendation", focus=focus, passage_id=recommendation.id)
            return recommendation
