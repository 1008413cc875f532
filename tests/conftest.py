"""
Shared fixtures for verse-guidance tests.

Record builders live in tests/factories.py; this module wires them into
engines, fake sources and a manual clock.
"""

from __future__ import annotations

import random
from collections.abc import Callable

import pytest

from tests.factories import ManualClock, raw_passage
from verse_guidance.clients.verse_source import FakeVerseSource
from verse_guidance.matching.engine import VerseGuidanceEngine
from verse_guidance.matching.themes import ThemeCatalog

SEED = 1234


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def catalog() -> ThemeCatalog:
    """Theme catalog loaded from the packaged YAML."""
    return ThemeCatalog()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(SEED)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def fake_source() -> FakeVerseSource:
    """Fake source that finds nothing unless a test presets results."""
    return FakeVerseSource()


@pytest.fixture
def make_engine(
    catalog: ThemeCatalog, rng: random.Random, clock: ManualClock
) -> Callable[[FakeVerseSource], VerseGuidanceEngine]:
    """Build an engine around a given fake source."""

    def _make(source: FakeVerseSource) -> VerseGuidanceEngine:
        return VerseGuidanceEngine(source, catalog=catalog, rng=rng, clock=clock)

    return _make


@pytest.fixture
def curated_source(catalog: ThemeCatalog) -> FakeVerseSource:
    """Fake source where search finds nothing but every curated coordinate resolves."""
    passages = {}
    for name in catalog.theme_names:
        for surah, ayah in catalog.get(name).fallback_coordinates:
            passages[(surah, ayah)] = raw_passage(surah, ayah)
    return FakeVerseSource(passages=passages)
