"""
Keyword Extractor.

Tokenizes free text (goal titles, descriptions, passage translations) into
normalized lowercase word tokens. No stopword removal happens here; the
query builder filters stopwords where it needs to.
"""

from __future__ import annotations

import re
from typing import Final

MIN_TOKEN_LENGTH: Final[int] = 3

_NON_ALNUM = re.compile(r"[^0-9a-z]")


def extract_keywords(text: str | None) -> list[str]:
    """Extract ordered lowercase alphanumeric tokens longer than two chars.

    Example:
        >>> extract_keywords("Build a daily exercise habit!")
        ['build', 'daily', 'exercise', 'habit']

    Args:
        text: Arbitrary free text

    Returns:
        Tokens in input order (duplicates preserved)
    """
    if not text:
        return []

    tokens: list[str] = []
    for word in text.lower().split():
        token = _NON_ALNUM.sub("", word)
        if len(token) >= MIN_TOKEN_LENGTH:
            tokens.append(token)
    return tokens


def compose_goal_text(title: str, description: str = "", category: str = "") -> str:
    """Build the goal text the engine matches on.

    The goal store holds title, description and category separately; they
    are joined with single spaces and trimmed.
    """
    return f"{title} {description} {category}".strip()
