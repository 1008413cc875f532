"""
Raw record models for the remote verse source.

Strict pydantic schemas applied at the client boundary. Anything the
remote API returns is validated here before the matching engine sees it;
records that fail validation are rejected (logged and skipped) by the
client instead of leaking loosely-typed dicts downstream.

Field aliases follow the AlQuran Cloud JSON names (camelCase).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Number of surahs in the mushaf; collection indices are 1-based.
MAX_COLLECTION_INDEX = 114


class CollectionInfo(BaseModel):
    """Metadata of one collection (surah)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    number: int = Field(ge=1, le=MAX_COLLECTION_INDEX)
    name: str = ""
    english_name: str = Field(default="", alias="englishName")
    english_name_translation: str = Field(default="", alias="englishNameTranslation")
    number_of_ayahs: int | None = Field(default=None, alias="numberOfAyahs")
    revelation_type: str | None = Field(default=None, alias="revelationType")

    @property
    def display_name(self) -> str:
        """English name, or a numbered placeholder when the API omits it."""
        return self.english_name or f"Surah {self.number}"


class RawMatch(BaseModel):
    """One search hit from the remote text-retrieval API.

    Attributes:
        number: Global ayah number, unique across the corpus
        text: Translated text of the matching passage
        number_in_surah: Line number inside the collection
        surah: Collection the passage belongs to
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    number: int = Field(ge=1)
    text: str = Field(min_length=1)
    number_in_surah: int = Field(ge=1, alias="numberInSurah")
    surah: CollectionInfo

    @property
    def translation(self) -> str:
        """Translated text (search hits only carry the searched edition)."""
        return self.text

    @property
    def coordinates(self) -> tuple[int, int]:
        """(collection_index, line_number) identity of the passage."""
        return (self.surah.number, self.number_in_surah)


class AyahEdition(BaseModel):
    """One edition of an ayah as returned by the /ayah endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    number: int = Field(ge=1)
    text: str
    number_in_surah: int = Field(ge=1, alias="numberInSurah")
    surah: CollectionInfo
    audio: str | None = None
    edition: dict[str, str | None] = Field(default_factory=dict)

    @property
    def identifier(self) -> str:
        """Edition identifier, e.g. 'en.asad'."""
        return self.edition.get("identifier") or ""


class RawPassage(BaseModel):
    """A passage fetched by coordinates, with all requested editions merged."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1)
    number_in_surah: int = Field(ge=1)
    surah: CollectionInfo
    text_original: str = ""
    text_translated: str = ""
    audio: str | None = None

    @property
    def coordinates(self) -> tuple[int, int]:
        """(collection_index, line_number) identity of the passage."""
        return (self.surah.number, self.number_in_surah)


class RandomPassage(BaseModel):
    """A passage plus its collection context, as used for daily guidance."""

    model_config = ConfigDict(frozen=True)

    passage: RawPassage
    collection: CollectionInfo
    theme: str | None = None
    context: str | None = None
    audio: str | None = None
