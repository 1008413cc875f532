"""
Passage Converter.

Builds Passage value objects from validated raw remote records, attaching
the theme tag, the first guidance items, a context line and randomly chosen
reflection and life-application templates.

Conversion never raises: a record that cannot be converted is logged and
None is returned so the caller can skip it.
"""

from __future__ import annotations

import random
from typing import Final

from verse_guidance.clients.models import CollectionInfo, RawMatch, RawPassage
from verse_guidance.core.logging import get_logger
from verse_guidance.matching.models import Passage
from verse_guidance.matching.themes import ThemeCatalog

logger = get_logger(__name__)

PASSAGE_GUIDANCE_ITEMS: Final[int] = 3
LIFE_APPLICATION_FALLBACK_THEME: Final[str] = "prayer"


class PassageConverter:
    """Converts raw remote records into Passages for a theme."""

    def __init__(self, catalog: ThemeCatalog, rng: random.Random | None = None) -> None:
        self._catalog = catalog
        self._rng = rng or random.Random()

    def from_match(
        self, raw: RawMatch, theme: str | None = None, context: str | None = None
    ) -> Passage | None:
        """Convert a search hit. Search hits carry no original-language text."""
        try:
            return self._build(
                passage_id=raw.number,
                collection=raw.surah,
                line_number=raw.number_in_surah,
                text_original="",
                text_translated=raw.translation,
                theme=theme,
                context=context,
                audio_ref=None,
            )
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            logger.warning("passage_conversion_failed", passage_id=raw.number, error=str(e))
            return None

    def from_passage(
        self,
        raw: RawPassage,
        collection: CollectionInfo | None = None,
        theme: str | None = None,
        context: str | None = None,
    ) -> Passage | None:
        """Convert a passage fetched by coordinates.

        Args:
            raw: Passage with merged editions
            collection: Collection metadata (defaults to the embedded surah)
            theme: Theme tag (defaults to the default theme)
            context: Context line (defaults to "From {collection}")
        """
        try:
            return self._build(
                passage_id=raw.number,
                collection=collection or raw.surah,
                line_number=raw.number_in_surah,
                text_original=raw.text_original,
                text_translated=raw.text_translated,
                theme=theme,
                context=context,
                audio_ref=raw.audio,
            )
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            logger.warning("passage_conversion_failed", passage_id=raw.number, error=str(e))
            return None

    def _build(
        self,
        *,
        passage_id: int,
        collection: CollectionInfo,
        line_number: int,
        text_original: str,
        text_translated: str,
        theme: str | None,
        context: str | None,
        audio_ref: str | None,
    ) -> Passage:
        if not text_translated:
            raise ValueError("passage has no translated text")

        theme_name = (theme or self._catalog.default_theme).strip().lower()
        profile = self._catalog.get(theme_name)

        reflections = profile.reflections or self._catalog.default_profile.reflections
        applications = (
            profile.life_applications
            or self._catalog.get(LIFE_APPLICATION_FALLBACK_THEME).life_applications
        )

        return Passage(
            id=passage_id,
            collection_name=collection.display_name,
            collection_index=collection.number,
            line_number=line_number,
            text_original=text_original,
            text_translated=text_translated,
            themes=frozenset({theme_name}),
            reflection=self._rng.choice(reflections),
            practical_guidance=profile.practical_guidance[:PASSAGE_GUIDANCE_ITEMS],
            context=context or f"From {collection.display_name}",
            life_application=self._rng.choice(applications) if applications else "",
            audio_ref=audio_ref,
        )
