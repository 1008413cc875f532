"""
Remote Verse Source clients.

HTTP client for the AlQuran Cloud API plus the protocol and in-memory fake
the matching engine is written against.
"""

from verse_guidance.clients.models import (
    CollectionInfo,
    RandomPassage,
    RawMatch,
    RawPassage,
)
from verse_guidance.clients.verse_source import (
    AlQuranCloudClient,
    FakeVerseSource,
    VerseSourceError,
    VerseSourceProtocol,
)

__all__ = [
    "AlQuranCloudClient",
    "CollectionInfo",
    "FakeVerseSource",
    "RandomPassage",
    "RawMatch",
    "RawPassage",
    "VerseSourceError",
    "VerseSourceProtocol",
]
