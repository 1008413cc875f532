"""
Thematic Fallback Store.

Serves passages from each theme's curated coordinate list when free-text
search yields nothing. Coordinates are shuffled, then fetched one at a time
(passage lookup followed by collection metadata); failures are logged and
skipped.
"""

from __future__ import annotations

import random
from typing import Final

from verse_guidance.clients.verse_source import VerseSourceError, VerseSourceProtocol
from verse_guidance.core.logging import get_logger
from verse_guidance.matching.conversion import PassageConverter
from verse_guidance.matching.models import Passage
from verse_guidance.matching.themes import ThemeCatalog

logger = get_logger(__name__)

DEFAULT_FALLBACK_LIMIT: Final[int] = 3


class ThematicFallbackStore:
    """Fetches curated passages for a theme from the remote source."""

    def __init__(
        self,
        source: VerseSourceProtocol,
        catalog: ThemeCatalog,
        converter: PassageConverter,
        rng: random.Random | None = None,
    ) -> None:
        self._source = source
        self._catalog = catalog
        self._converter = converter
        self._rng = rng or random.Random()

    async def fetch(self, theme: str, limit: int = DEFAULT_FALLBACK_LIMIT) -> list[Passage]:
        """Fetch up to `limit` curated passages for a theme.

        Args:
            theme: Theme name (unknown names use the default theme's list)
            limit: Number of coordinates attempted

        Returns:
            Successfully converted passages (possibly empty)
        """
        profile = self._catalog.get(theme)
        coordinates = list(profile.fallback_coordinates)
        self._rng.shuffle(coordinates)

        passages: list[Passage] = []
        for collection_index, line_number in coordinates[:limit]:
            try:
                raw = await self._source.get_passage_by_coordinates(
                    collection_index, line_number
                )
                collection = await self._source.get_collection_metadata(collection_index)
            except VerseSourceError as e:
                logger.warning(
                    "fallback_fetch_failed",
                    theme=profile.name,
                    coordinates=f"{collection_index}:{line_number}",
                    error=str(e),
                )
                continue

            passage = self._converter.from_passage(
                raw,
                collection,
                theme=profile.name,
                context=f"Curated verse about {profile.name}",
            )
            if passage is not None:
                passages.append(passage)

        logger.debug("fallback_fetched", theme=profile.name, count=len(passages))
        return passages
