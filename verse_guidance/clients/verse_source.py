"""
Remote Verse Source Client

HTTP client for the AlQuran Cloud text API: free-text search, lookup by
coordinates, collection metadata and random passages.

Patterns Applied:
- Connection pooling (reuse one httpx.AsyncClient)
- Repository Pattern: Protocol for duck typing, FakeVerseSource for tests
- Custom namespaced exceptions
- Boundary validation: raw JSON -> pydantic models, malformed entries skipped

Every call is attempted exactly once; callers decide how to recover.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Mapping
from typing import Any, Final, Protocol, runtime_checkable
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from verse_guidance.clients.models import (
    AyahEdition,
    CollectionInfo,
    RandomPassage,
    RawMatch,
    RawPassage,
)
from verse_guidance.core.exceptions import VerseGuidanceError
from verse_guidance.core.logging import get_logger

logger = get_logger(__name__)

# =============================================================================
# Module Constants
# =============================================================================

DEFAULT_BASE_URL: Final[str] = "https://api.alquran.cloud/v1"
DEFAULT_TIMEOUT: Final[float] = 10.0
DEFAULT_LANGUAGE: Final[str] = "en"
DEFAULT_ORIGINAL_EDITION: Final[str] = "quran-uthmani"
DEFAULT_TRANSLATION_EDITION: Final[str] = "en.asad"
DEFAULT_AUDIO_EDITION: Final[str] = "ar.alafasy"

# Global ayah numbers run from 1 to 6236
TOTAL_AYAHS: Final[int] = 6236

STATUS_NOT_FOUND: Final[int] = 404


# =============================================================================
# Custom Exceptions
# =============================================================================


class VerseSourceError(VerseGuidanceError):
    """Raised for any failure talking to the remote verse source.

    Covers transport errors, timeouts, non-2xx responses and payloads that
    do not match the expected schema.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# Protocol for Duck Typing (Repository Pattern)
# =============================================================================


@runtime_checkable
class VerseSourceProtocol(Protocol):
    """Protocol for remote verse sources.

    Enables FakeVerseSource for testing without real HTTP calls.
    """

    async def search_passages(
        self, query: str, language: str = DEFAULT_LANGUAGE
    ) -> list[RawMatch]:
        """Search passages whose translation matches the query."""
        ...

    async def get_passage_by_coordinates(
        self, collection_index: int, line_number: int
    ) -> RawPassage:
        """Fetch one passage by (collection, line)."""
        ...

    async def get_collection_metadata(self, collection_index: int) -> CollectionInfo:
        """Fetch metadata for one collection."""
        ...

    async def get_random_passage(self) -> RandomPassage:
        """Fetch a random passage with its collection context."""
        ...


# =============================================================================
# AlQuranCloudClient Implementation
# =============================================================================


class AlQuranCloudClient:
    """HTTP client for the AlQuran Cloud API.

    Attributes:
        base_url: Base URL of the API (default: https://api.alquran.cloud/v1)
        timeout: Request timeout in seconds
        original_edition: Edition used for the original (Arabic) text
        translation_edition: Edition used for the translated text
        audio_edition: Edition that carries recitation audio URLs
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        original_edition: str = DEFAULT_ORIGINAL_EDITION,
        translation_edition: str = DEFAULT_TRANSLATION_EDITION,
        audio_edition: str = DEFAULT_AUDIO_EDITION,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the API
            timeout: Request timeout in seconds
            original_edition: Edition identifier for the original text
            translation_edition: Edition identifier for the translation
            audio_edition: Edition identifier carrying audio
            rng: Random source for get_random_passage()
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.original_edition = original_edition
        self.translation_edition = translation_edition
        self.audio_edition = audio_edition
        self._rng = rng or random.Random()

        # Connection pooling: single client instance
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> AlQuranCloudClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def _editions(self) -> str:
        return ",".join(
            (self.original_edition, self.translation_edition, self.audio_edition)
        )

    async def search_passages(
        self, query: str, language: str = DEFAULT_LANGUAGE
    ) -> list[RawMatch]:
        """Search passages whose translation contains the query.

        A 404 from the API means "no matches" and is returned as [].

        Args:
            query: Free-text search string
            language: Language code or edition identifier to search in

        Returns:
            Validated RawMatch list (malformed entries are skipped)

        Raises:
            VerseSourceError: On transport, HTTP or payload errors
        """
        query = query.strip()
        if not query:
            return []

        path = f"/search/{quote(query, safe='')}/all/{quote(language, safe='.')}"
        try:
            data = await self._get_json(path)
        except VerseSourceError as e:
            if e.status_code == STATUS_NOT_FOUND:
                return []
            raise

        if not isinstance(data, dict):
            raise VerseSourceError(f"Malformed search payload for '{query}'")

        return self._parse_matches(data.get("matches") or [])

    async def get_passage_by_coordinates(
        self, collection_index: int, line_number: int
    ) -> RawPassage:
        """Fetch one passage with original, translated and audio editions.

        Args:
            collection_index: Surah number (1-114)
            line_number: Ayah number inside the surah

        Returns:
            RawPassage with all editions merged

        Raises:
            VerseSourceError: On transport, HTTP or payload errors
        """
        data = await self._get_json(
            f"/ayah/{collection_index}:{line_number}/editions/{self._editions}"
        )
        return self._parse_passage(data)

    async def get_collection_metadata(self, collection_index: int) -> CollectionInfo:
        """Fetch surah metadata.

        Raises:
            VerseSourceError: On transport, HTTP or payload errors
        """
        data = await self._get_json(f"/surah/{collection_index}")
        try:
            return CollectionInfo.model_validate(data)
        except ValidationError as e:
            raise VerseSourceError(
                f"Malformed collection metadata for {collection_index}: {e}"
            ) from e

    async def get_random_passage(self) -> RandomPassage:
        """Fetch a uniformly random passage.

        Raises:
            VerseSourceError: On transport, HTTP or payload errors
        """
        number = self._rng.randint(1, TOTAL_AYAHS)
        data = await self._get_json(f"/ayah/{number}/editions/{self._editions}")
        passage = self._parse_passage(data)
        return RandomPassage(
            passage=passage,
            collection=passage.surah,
            audio=passage.audio,
        )

    async def _get_json(self, path: str) -> Any:
        """Execute one GET and unwrap the API envelope.

        Args:
            path: Path relative to base_url

        Returns:
            The "data" member of the response envelope

        Raises:
            VerseSourceError: On any failure (no retries)
        """
        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as e:
            raise VerseSourceError(f"Timeout calling {path}: {e}") from e
        except httpx.HTTPError as e:
            raise VerseSourceError(f"HTTP error calling {path}: {e}") from e

        if response.status_code >= 400:
            error_type = self._classify_error(response.status_code)
            raise VerseSourceError(
                f"{error_type} calling {path}: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise VerseSourceError(f"Invalid JSON from {path}: {e}") from e

        if not isinstance(payload, dict) or "data" not in payload:
            raise VerseSourceError(f"Missing data envelope from {path}")

        return payload["data"]

    def _classify_error(self, status_code: int) -> str:
        """Classify HTTP error type.

        Args:
            status_code: HTTP status code

        Returns:
            Error type: 'client_error' or 'server_error'
        """
        if 400 <= status_code < 500:
            return "client_error"
        return "server_error"

    def _parse_matches(self, items: list[Any]) -> list[RawMatch]:
        """Validate search hits, skipping malformed entries.

        Args:
            items: Raw "matches" list from the API

        Returns:
            List of RawMatch objects
        """
        matches: list[RawMatch] = []
        for item in items:
            try:
                matches.append(RawMatch.model_validate(item))
            except ValidationError as e:
                logger.warning("raw_match_rejected", error=str(e), item=item)
        return matches

    def _parse_passage(self, data: Any) -> RawPassage:
        """Merge the per-edition ayah objects into one RawPassage.

        Args:
            data: "data" member of an /ayah/.../editions response

        Returns:
            RawPassage

        Raises:
            VerseSourceError: If the payload is empty or malformed
        """
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list) or not data:
            raise VerseSourceError("Empty passage payload")

        try:
            editions = [AyahEdition.model_validate(item) for item in data]
        except ValidationError as e:
            raise VerseSourceError(f"Malformed passage payload: {e}") from e

        by_identifier = {edition.identifier: edition for edition in editions}
        first = editions[0]
        original = by_identifier.get(self.original_edition, first)
        translation = by_identifier.get(self.translation_edition)
        audio = next((e.audio for e in editions if e.audio), None)

        return RawPassage(
            number=first.number,
            number_in_surah=first.number_in_surah,
            surah=first.surah,
            text_original=original.text,
            text_translated=translation.text if translation else "",
            audio=audio,
        )

    async def close(self) -> None:
        """Close the HTTP client connection pool."""
        await self._client.aclose()


# =============================================================================
# FakeVerseSource for Testing
# =============================================================================


class FakeVerseSource:
    """Fake verse source for unit testing without real HTTP.

    Implements VerseSourceProtocol. Records every call so tests can assert
    how many remote round-trips the engine made.
    """

    def __init__(
        self,
        search_results: Mapping[str, list[RawMatch]] | None = None,
        passages: Mapping[tuple[int, int], RawPassage] | None = None,
        collections: Mapping[int, CollectionInfo] | None = None,
        random_passage: RandomPassage | None = None,
        default_results: list[RawMatch] | None = None,
        error: VerseSourceError | None = None,
    ) -> None:
        """Initialize fake source with preset data.

        Args:
            search_results: Query string -> results
            passages: (collection, line) -> passage
            collections: Collection index -> metadata
            random_passage: Passage returned by get_random_passage()
            default_results: Results for queries not in search_results
            error: If set, every call raises it
        """
        self._search_results = dict(search_results or {})
        self._passages = dict(passages or {})
        self._collections = dict(collections or {})
        self._random_passage = random_passage
        self._default_results = list(default_results or [])
        self._error = error

        self.search_calls: list[tuple[str, str]] = []
        self.coordinate_calls: list[tuple[int, int]] = []
        self.metadata_calls: list[int] = []
        self.random_calls: int = 0

    async def search_passages(
        self, query: str, language: str = DEFAULT_LANGUAGE
    ) -> list[RawMatch]:
        """Return preset results for the query."""
        await asyncio.sleep(0)
        self.search_calls.append((query, language))
        if self._error:
            raise self._error
        return list(self._search_results.get(query, self._default_results))

    async def get_passage_by_coordinates(
        self, collection_index: int, line_number: int
    ) -> RawPassage:
        """Return the preset passage or raise a 404 VerseSourceError."""
        await asyncio.sleep(0)
        self.coordinate_calls.append((collection_index, line_number))
        if self._error:
            raise self._error
        key = (collection_index, line_number)
        if key not in self._passages:
            raise VerseSourceError(
                f"No passage at {collection_index}:{line_number}",
                status_code=STATUS_NOT_FOUND,
            )
        return self._passages[key]

    async def get_collection_metadata(self, collection_index: int) -> CollectionInfo:
        """Return preset metadata, or the surah embedded in a preset passage."""
        await asyncio.sleep(0)
        self.metadata_calls.append(collection_index)
        if self._error:
            raise self._error
        if collection_index in self._collections:
            return self._collections[collection_index]
        for passage in self._passages.values():
            if passage.surah.number == collection_index:
                return passage.surah
        raise VerseSourceError(
            f"No collection {collection_index}", status_code=STATUS_NOT_FOUND
        )

    async def get_random_passage(self) -> RandomPassage:
        """Return the preset random passage."""
        await asyncio.sleep(0)
        self.random_calls += 1
        if self._error:
            raise self._error
        if self._random_passage is None:
            raise VerseSourceError("No random passage configured")
        return self._random_passage

    def set_search_results(self, query: str, results: list[RawMatch]) -> None:
        """Set results returned for one query."""
        self._search_results[query] = results
