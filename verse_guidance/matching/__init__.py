"""Goal to passage matching engine.

Public entry point is VerseGuidanceEngine; the remaining exports are the
building blocks it composes, usable on their own.
"""

from verse_guidance.matching.cache import TTLCache
from verse_guidance.matching.classifier import ThemeClassifier
from verse_guidance.matching.engine import VerseGuidanceEngine
from verse_guidance.matching.keywords import compose_goal_text, extract_keywords
from verse_guidance.matching.models import MatchResult, Passage, ThematicCollection
from verse_guidance.matching.query_builder import QueryBuilder
from verse_guidance.matching.scorer import calculate_relevance_score
from verse_guidance.matching.themes import ThemeCatalog, ThemeProfile

__all__ = [
    "MatchResult",
    "Passage",
    "QueryBuilder",
    "TTLCache",
    "ThematicCollection",
    "ThemeCatalog",
    "ThemeClassifier",
    "ThemeProfile",
    "VerseGuidanceEngine",
    "calculate_relevance_score",
    "compose_goal_text",
    "extract_keywords",
]
