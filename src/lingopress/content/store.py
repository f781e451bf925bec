"""Content store over a pluggable storage backend.

Owns the logical document shape and provides list/get/append.  Appends are
read-modify-write with no locking: two concurrent appends against the same
backend can race and the later write wins, dropping the earlier entry.
Serializing them would need a document lock or an ETag check-and-set on the
backend; neither exists here.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from lingopress.content.backends import StorageBackend
from lingopress.content.models import ContentEntry, Language, NewEntryInput

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _millis(instant: datetime) -> str:
    return f"{instant.microsecond // 1000:03d}"


def format_published_at(instant: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2026-10-19T08:15:30.123Z``."""
    instant = instant.astimezone(UTC)
    return instant.strftime("%Y-%m-%dT%H:%M:%S.") + _millis(instant) + "Z"


def create_slug(instant: datetime, language: Language | str) -> str:
    """Return ``<language>-<YYYYMMDDHHmmssSSS>`` for a UTC instant."""
    instant = instant.astimezone(UTC)
    return f"{Language(language).value}-{instant.strftime('%Y%m%d%H%M%S')}{_millis(instant)}"


class ContentStore:
    """List, fetch and append entries of the per-language content document."""

    def __init__(
        self,
        backend: StorageBackend,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._backend = backend
        self._clock = clock

    def list_entries(self, language: Language | str) -> list[ContentEntry]:
        """Return the language's entries, most recently published first."""
        document = self._backend.read()
        entries = document.entries_for(language)
        return sorted(entries, key=lambda e: e.published_at, reverse=True)

    def get_entry(self, language: Language | str, slug: str) -> ContentEntry | None:
        """Return the entry with *slug*, or None if the language has none."""
        for entry in self.list_entries(language):
            if entry.slug == slug:
                return entry
        return None

    def append_entry(self, new: NewEntryInput) -> ContentEntry:
        """Create an entry stamped with the current instant and persist it."""
        document = self._backend.read()
        now = self._clock()
        entry = ContentEntry(
            id=str(uuid.uuid4()),
            slug=create_slug(now, new.language),
            language=new.language,
            text=new.text,
            source_text=new.source_text,
            published_at=format_published_at(now),
            timezone=new.timezone,
            city=new.city,
            weather_summary=new.weather_summary,
        )
        self._backend.write(document.with_entry(entry))
        logger.info("Appended %s entry %s", entry.language.value, entry.slug)
        return entry
