"""
Guidance generation.

Turns a theme profile plus the user's own words into the practical steps
shown beside a match or a personalized recommendation.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from verse_guidance.matching.models import MatchResult, Passage
from verse_guidance.matching.themes import ThemeProfile

TOP_THEME_ITEMS: Final[int] = 2
DEFAULT_FOCUS: Final[str] = "your current focus"
MAX_PREFIX_GOALS: Final[int] = 2


def generate_practical_steps(profile: ThemeProfile, goal: str) -> tuple[str, ...]:
    """Top theme guidance followed by three steps specific to the goal."""
    return (
        *profile.practical_guidance[:TOP_THEME_ITEMS],
        f"Set a specific timeline for: {goal}",
        f"Make daily du'a for success in: {goal}",
        f'Break down "{goal}" into smaller, manageable tasks',
    )


def generate_personalized_guidance(
    profile: ThemeProfile, user_goals: Sequence[str]
) -> tuple[str, ...]:
    """Top theme guidance followed by tips that reference the user's goals."""
    focus = user_goals[0] if user_goals and user_goals[0] else DEFAULT_FOCUS
    return (
        *profile.practical_guidance[:TOP_THEME_ITEMS],
        f'Apply this wisdom to your goal: "{focus}"',
        "Reflect on this verse during your daily prayer",
        "Share this insight with someone who could benefit from it",
    )


def personalize_life_application(life_application: str, user_goals: Sequence[str]) -> str:
    """Prefix a life application with the first two of the user's goals."""
    if not user_goals:
        return life_application
    goals = ", ".join(user_goals[:MAX_PREFIX_GOALS])
    return f"Based on your current goals ({goals}), {life_application}"


def build_match_result(
    profile: ThemeProfile, passage: Passage, goal: str, relevance_score: float
) -> MatchResult:
    """Wrap a passage with the theme's steps, prayer and habits for a goal."""
    return MatchResult(
        passage=passage,
        relevance_score=relevance_score,
        practical_steps=generate_practical_steps(profile, goal),
        prayer_recommendation=profile.prayer_recommendation,
        related_habits=profile.related_habits,
    )
