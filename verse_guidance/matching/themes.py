"""
Theme Catalog.

Loads every per-theme table the matching engine uses (synonyms, practical
guidance, prayer recommendations, related habits, reflection templates,
curated fallback coordinates, ...) plus the global vocabularies (stopwords,
semantic expansions, generic guidance phrases) from a YAML file.

Pattern: Configuration-Driven tables
- YAML parsed once at construction, validated, frozen into dataclasses
- Lookups never raise; unknown themes resolve to the default theme

YAML 1.1 resolves bare words such as "on"/"yes" to booleans, so every
scalar list is coerced with str() on load.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import yaml  # type: ignore[import-untyped]

from verse_guidance.core.exceptions import ThemeCatalogError
from verse_guidance.matching.models import Passage

# =============================================================================
# Constants
# =============================================================================

DEFAULT_CATALOG_PATH: Final[Path] = Path(__file__).parent.parent / "data" / "themes.yaml"
DEFAULT_THEME: Final[str] = "guidance"

REQUIRED_THEME_FIELDS: Final[tuple[str, ...]] = (
    "description",
    "search_terms",
    "practical_guidance",
    "reflections",
)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True, slots=True)
class ThemeProfile:
    """Everything the engine knows about one theme.

    Attributes:
        name: Lowercase theme name
        description: One-line description shown on collections
        search_terms: Canonical search phrase for the remote source
        synonyms: Words that vote for this theme during classification
        practical_guidance: Ordered guidance items
        prayer_recommendation: Recommended dua, if any
        related_habits: Habits shown next to matches
        recommended_actions: Short actions shown on collections
        reflections: Reflection templates (one chosen at random)
        life_applications: Life-application templates (one chosen at random)
        fallback_coordinates: Curated (collection, line) pairs
        boost_phrases: Extra category queries appended last
    """

    name: str
    description: str
    search_terms: str
    synonyms: frozenset[str]
    practical_guidance: tuple[str, ...]
    prayer_recommendation: str | None
    related_habits: tuple[str, ...]
    recommended_actions: tuple[str, ...]
    reflections: tuple[str, ...]
    life_applications: tuple[str, ...]
    fallback_coordinates: tuple[tuple[int, int], ...]
    boost_phrases: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class GoalTermRule:
    """Maps a theme or goal-text trigger to domain search vocabulary."""

    terms: str
    themes: frozenset[str]
    triggers: tuple[str, ...]

    def matches(self, goal_lower: str, theme: str) -> bool:
        """True when the theme is listed or any trigger occurs in the goal."""
        return theme in self.themes or any(t in goal_lower for t in self.triggers)


# =============================================================================
# Theme Catalog
# =============================================================================


class ThemeCatalog:
    """Registry of theme profiles and shared vocabularies.

    Usage:
        catalog = ThemeCatalog()
        profile = catalog.get("fitness")
        profile.prayer_recommendation
    """

    def __init__(self, config_path: Path | None = None) -> None:
        """Load the catalog from YAML.

        Args:
            config_path: Path to themes.yaml. Uses the packaged file if None.

        Raises:
            ThemeCatalogError: If the file is missing, invalid, or incomplete
        """
        self._config_path = config_path or DEFAULT_CATALOG_PATH
        config = self._load_config()

        self.default_theme: str = str(config.get("default_theme", DEFAULT_THEME))
        self.stopwords: frozenset[str] = frozenset(_strings(config.get("stopwords")))
        self.semantic_expansions: dict[str, tuple[str, ...]] = {
            str(word): tuple(_strings(related))
            for word, related in (config.get("semantic_expansions") or {}).items()
        }
        self.guidance_phrases: tuple[str, ...] = tuple(
            _strings(config.get("guidance_phrases"))
        )
        self.goal_term_rules: tuple[GoalTermRule, ...] = tuple(
            self._parse_rule(rule) for rule in config.get("goal_term_rules") or []
        )
        self.alternate_themes: tuple[str, ...] = tuple(
            _strings(config.get("alternate_themes"))
        )

        self._profiles: dict[str, ThemeProfile] = {}
        for name, raw in (config.get("themes") or {}).items():
            self._profiles[str(name).lower()] = self._parse_profile(str(name).lower(), raw)

        if self.default_theme not in self._profiles:
            msg = f"Default theme '{self.default_theme}' missing from {self._config_path}"
            raise ThemeCatalogError(msg)

        self.fallback_passage: Passage | None = self._parse_passage(
            config.get("fallback_passage")
        )

    def _load_config(self) -> dict[str, Any]:
        """Read and parse the YAML file.

        Raises:
            ThemeCatalogError: If file missing or invalid YAML
        """
        if not self._config_path.exists():
            msg = f"Theme catalog not found: {self._config_path}"
            raise ThemeCatalogError(msg)

        try:
            with open(self._config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in theme catalog: {e}"
            raise ThemeCatalogError(msg) from e

        if not isinstance(config, dict):
            msg = f"Theme catalog must be a mapping: {self._config_path}"
            raise ThemeCatalogError(msg)
        return config

    def _parse_profile(self, name: str, raw: Any) -> ThemeProfile:
        if not isinstance(raw, Mapping):
            raise ThemeCatalogError(f"Theme '{name}' must be a mapping")

        missing = [f for f in REQUIRED_THEME_FIELDS if not raw.get(f)]
        if missing:
            raise ThemeCatalogError(f"Theme '{name}' missing fields: {missing}")

        try:
            coordinates = tuple(
                (int(pair[0]), int(pair[1])) for pair in raw.get("fallback_coordinates") or []
            )
        except (TypeError, ValueError, IndexError) as e:
            raise ThemeCatalogError(f"Theme '{name}' has bad fallback coordinates") from e

        prayer = raw.get("prayer_recommendation")
        return ThemeProfile(
            name=name,
            description=str(raw["description"]),
            search_terms=str(raw["search_terms"]),
            synonyms=frozenset(s.lower() for s in _strings(raw.get("synonyms"))),
            practical_guidance=tuple(_strings(raw["practical_guidance"])),
            prayer_recommendation=str(prayer) if prayer else None,
            related_habits=tuple(_strings(raw.get("related_habits"))),
            recommended_actions=tuple(_strings(raw.get("recommended_actions"))),
            reflections=tuple(_strings(raw["reflections"])),
            life_applications=tuple(_strings(raw.get("life_applications"))),
            fallback_coordinates=coordinates,
            boost_phrases=tuple(_strings(raw.get("boost_phrases"))),
        )

    @staticmethod
    def _parse_rule(raw: Any) -> GoalTermRule:
        if not isinstance(raw, Mapping) or not raw.get("terms"):
            raise ThemeCatalogError(f"Goal term rule needs 'terms': {raw!r}")
        return GoalTermRule(
            terms=str(raw["terms"]),
            themes=frozenset(_strings(raw.get("themes"))),
            triggers=tuple(t.lower() for t in _strings(raw.get("triggers"))),
        )

    @staticmethod
    def _parse_passage(raw: Any) -> Passage | None:
        if not raw:
            return None
        try:
            return Passage(
                id=int(raw["id"]),
                collection_name=str(raw["collection_name"]),
                collection_index=int(raw["collection_index"]),
                line_number=int(raw["line_number"]),
                text_original=str(raw.get("text_original", "")),
                text_translated=str(raw["text_translated"]),
                themes=frozenset(_strings(raw.get("themes"))),
                reflection=str(raw.get("reflection", "")),
                practical_guidance=tuple(_strings(raw.get("practical_guidance"))),
                context=str(raw.get("context", "")),
                life_application=str(raw.get("life_application", "")),
                audio_ref=raw.get("audio_ref"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ThemeCatalogError(f"Malformed fallback passage: {e}") from e

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def theme_names(self) -> list[str]:
        """All theme names in registration order."""
        return list(self._profiles)

    @property
    def scorable_themes(self) -> list[ThemeProfile]:
        """Profiles the classifier scores (every theme except the default)."""
        return [p for n, p in self._profiles.items() if n != self.default_theme]

    @property
    def default_profile(self) -> ThemeProfile:
        return self._profiles[self.default_theme]

    def get(self, theme: str) -> ThemeProfile:
        """Profile for a theme; unknown names resolve to the default theme."""
        return self._profiles.get(theme.strip().lower(), self.default_profile)

    def goal_specific_terms(self, goal: str, theme: str) -> str:
        """Domain vocabulary for a goal, or "" when no rule applies."""
        goal_lower = goal.lower()
        for rule in self.goal_term_rules:
            if rule.matches(goal_lower, theme):
                return rule.terms
        return ""

    def __contains__(self, theme: object) -> bool:
        return isinstance(theme, str) and theme.strip().lower() in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)


def _strings(values: Iterable[Any] | None) -> list[str]:
    """Coerce a YAML list to strings, dropping None entries."""
    if not values:
        return []
    if isinstance(values, str):
        return [values]
    return [str(v) for v in values if v is not None]
