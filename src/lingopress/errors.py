"""Error taxonomy shared by the store, the publish action and the CLI."""

from __future__ import annotations


class LingopressError(Exception):
    """Base class for all lingopress errors."""


class PublishValidationError(LingopressError):
    """Publish input was rejected before any storage I/O happened."""


class StorageError(LingopressError):
    """The storage backend could not read or write the content document.

    ``status`` holds the HTTP status code when the failure came from the
    remote blob store.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class DocumentParseError(LingopressError):
    """The stored content document exists but is not valid."""


class EntryNotFound(LingopressError):
    """No entry with the requested slug exists in a language feed."""

    def __init__(self, language: str, slug: str) -> None:
        super().__init__(f"No {language} entry with slug {slug!r}")
        self.language = language
        self.slug = slug


class ConfigError(LingopressError):
    """A config file or environment variable holds an invalid value."""
