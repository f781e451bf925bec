"""Content domain models — pure Pydantic v2 data types.

A ContentDocument is the single persisted aggregate: one ordered list of
ContentEntry per supported language.  Field names on disk are camelCase
(``sourceText``, ``publishedAt``, ``weatherSummary``); Python attributes are
snake_case and the aliases are used for every dump.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from lingopress.errors import DocumentParseError


class Language(StrEnum):
    """Target language of a published entry."""

    ZH = "zh"
    JP = "jp"
    EN = "en"


LANGUAGES: tuple[Language, ...] = (Language.ZH, Language.JP, Language.EN)


class NewEntryInput(BaseModel):
    """Caller-supplied fields for a new entry."""

    model_config = ConfigDict(populate_by_name=True)

    language: Language
    text: str
    source_text: str = Field(default="", alias="sourceText")
    timezone: str = ""
    city: str = ""
    weather_summary: str = Field(default="", alias="weatherSummary")


class ContentEntry(BaseModel):
    """One published unit of content plus its publication metadata.

    Entries are immutable once appended.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    slug: str
    language: Language
    text: str
    source_text: str = Field(alias="sourceText")
    published_at: str = Field(alias="publishedAt")  # ISO-8601, UTC, ms precision
    timezone: str = ""
    city: str = ""
    weather_summary: str = Field(default="", alias="weatherSummary")


class ContentDocument(BaseModel):
    """The complete persisted state: exactly one entry list per language."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    zh: list[ContentEntry] = Field(default_factory=list)
    jp: list[ContentEntry] = Field(default_factory=list)
    en: list[ContentEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_partitions(self) -> ContentDocument:
        for language in LANGUAGES:
            for entry in self.entries_for(language):
                if entry.language != language:
                    raise ValueError(
                        f"entry {entry.slug!r} has language {entry.language.value!r} "
                        f"but is stored under {language.value!r}"
                    )
        return self

    @classmethod
    def empty(cls) -> ContentDocument:
        return cls()

    def entries_for(self, language: Language | str) -> list[ContentEntry]:
        """Return the stored (insertion-ordered) entries of one language."""
        return getattr(self, Language(language).value)

    def with_entry(self, entry: ContentEntry) -> ContentDocument:
        """Return a copy of this document with *entry* appended to its language."""
        key = entry.language.value
        return self.model_copy(update={key: [*self.entries_for(entry.language), entry]})

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, raw: str | bytes) -> ContentDocument:
        """Parse a stored document.

        Blank input is the empty document.  Anything else that is not a
        valid document raises DocumentParseError.
        """
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DocumentParseError(f"Content document is not UTF-8: {exc}") from exc
        if not raw.strip():
            return cls.empty()
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise DocumentParseError(f"Invalid content document: {exc}") from exc
