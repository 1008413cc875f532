"""
Matching engine data models.

Passage, MatchResult and ThematicCollection are immutable value objects.
Derived variants (e.g. a personalized recommendation) are produced with
dataclasses.replace(), never by mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Passage:
    """A single retrievable passage with translation and guidance metadata.

    Identity is (collection_index, line_number); id is the remote source's
    global passage number.

    Attributes:
        id: Global numeric key of the passage
        collection_name: Display name of the collection (surah)
        collection_index: Collection number (1-114)
        line_number: Line (ayah) number inside the collection
        text_original: Original-language text ("" for search hits)
        text_translated: Translated text
        themes: Theme tags assigned at conversion time
        reflection: Generic per-theme reflection sentence
        practical_guidance: First guidance items of the theme
        context: Why this passage was selected
        life_application: Generic per-theme application sentence
        audio_ref: Recitation audio URL, when the source provides one
    """

    id: int
    collection_name: str
    collection_index: int
    line_number: int
    text_original: str
    text_translated: str
    themes: frozenset[str]
    reflection: str
    practical_guidance: tuple[str, ...] = ()
    context: str = ""
    life_application: str = ""
    audio_ref: str | None = None

    @property
    def coordinates(self) -> tuple[int, int]:
        """(collection_index, line_number) identity of the passage."""
        return (self.collection_index, self.line_number)


@dataclass(frozen=True, slots=True)
class MatchResult:
    """A passage matched to a goal, with the guidance shown alongside it.

    Attributes:
        passage: The matched passage
        relevance_score: Heuristic overlap score in [0, 0.95]
        practical_steps: Theme guidance plus goal-specific steps
        prayer_recommendation: Recommended dua for the theme, if any
        related_habits: Habits related to the theme
    """

    passage: Passage
    relevance_score: float
    practical_steps: tuple[str, ...] = ()
    prayer_recommendation: str | None = None
    related_habits: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ThematicCollection:
    """Up to five passages for one theme, with the theme's guidance.

    Attributes:
        theme: Capitalized theme name
        description: One-line theme description
        passages: Passages selected for the theme
        practical_guidance: Full guidance list of the theme
        recommended_actions: Short recommended actions for the theme
    """

    theme: str
    description: str
    passages: tuple[Passage, ...] = field(default_factory=tuple)
    practical_guidance: tuple[str, ...] = ()
    recommended_actions: tuple[str, ...] = ()
