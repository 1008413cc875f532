"""
Tests for the Thematic Fallback Store.

- TestFetch: curated coordinates, sequential lookups, failure skipping
"""

from __future__ import annotations

import random

import pytest

from tests.factories import raw_passage
from verse_guidance.clients.verse_source import FakeVerseSource, VerseSourceError
from verse_guidance.matching.conversion import PassageConverter
from verse_guidance.matching.fallback import ThematicFallbackStore
from verse_guidance.matching.themes import ThemeCatalog


def make_store(source: FakeVerseSource, catalog: ThemeCatalog) -> ThematicFallbackStore:
    rng = random.Random(11)
    return ThematicFallbackStore(source, catalog, PassageConverter(catalog, rng), rng)


class TestFetch:
    """Curated passages for a theme."""

    @pytest.mark.asyncio
    async def test_draws_only_from_curated_coordinates(
        self, curated_source: FakeVerseSource, catalog: ThemeCatalog
    ) -> None:
        store = make_store(curated_source, catalog)
        curated = set(catalog.get("family").fallback_coordinates)

        passages = await store.fetch("family")

        assert len(passages) == 3
        assert {p.coordinates for p in passages} <= curated
        assert all(p.themes == frozenset({"family"}) for p in passages)

    @pytest.mark.asyncio
    async def test_lookup_then_metadata_per_coordinate(
        self, curated_source: FakeVerseSource, catalog: ThemeCatalog
    ) -> None:
        """Each coordinate is fetched, then its collection metadata, one at a time."""
        store = make_store(curated_source, catalog)

        await store.fetch("prayer")

        assert len(curated_source.coordinate_calls) == 3
        assert curated_source.metadata_calls == [c for c, _ in curated_source.coordinate_calls]

    @pytest.mark.asyncio
    async def test_coordinates_shuffled(self, catalog: ThemeCatalog) -> None:
        """Different seeds visit the curated list in different orders."""
        orders = set()
        for seed in range(10):
            source = FakeVerseSource()
            rng = random.Random(seed)
            store = ThematicFallbackStore(source, catalog, PassageConverter(catalog, rng), rng)
            await store.fetch("patience")
            orders.add(tuple(source.coordinate_calls))
        assert len(orders) > 1

    @pytest.mark.asyncio
    async def test_failures_skipped(self, catalog: ThemeCatalog) -> None:
        """Missing coordinates are logged and skipped; the rest still convert."""
        coordinates = catalog.get("anxiety").fallback_coordinates
        source = FakeVerseSource(passages={c: raw_passage(*c) for c in coordinates[:1]})
        store = make_store(source, catalog)

        passages = await store.fetch("anxiety", limit=len(coordinates))

        assert [p.coordinates for p in passages] == [coordinates[0]]
        assert len(source.coordinate_calls) == len(coordinates)

    @pytest.mark.asyncio
    async def test_source_down(self, catalog: ThemeCatalog) -> None:
        source = FakeVerseSource(error=VerseSourceError("down", status_code=503))
        assert await make_store(source, catalog).fetch("health") == []
