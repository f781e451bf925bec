"""Publish action — validate an editor submission and append it to the store."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from lingopress.content.models import ContentEntry, Language, NewEntryInput
from lingopress.content.store import ContentStore
from lingopress.errors import PublishValidationError

logger = logging.getLogger(__name__)

EMPTY_TEXT_MESSAGE = "发布内容不能为空"


class PublishPayload(BaseModel):
    """What the editor submits."""

    model_config = ConfigDict(populate_by_name=True)

    language: Language
    text: str
    source_text: str = Field(default="", alias="sourceText")
    timezone: str = ""
    city: str = ""
    weather_summary: str = Field(default="", alias="weatherSummary")


class PublishResult(BaseModel):
    """The created entry and the view paths that now hold stale output."""

    entry: ContentEntry
    invalidated_paths: list[str]


def stale_paths(entry: ContentEntry) -> list[str]:
    """Feed and entry-page paths affected by publishing *entry*."""
    language = entry.language.value
    return [f"/{language}", f"/{language}/{entry.slug}"]


def publish_entry(
    payload: PublishPayload,
    store: ContentStore,
    on_invalidate: Callable[[list[str]], None] | None = None,
) -> PublishResult:
    """Publish the payload as a new entry.

    Raises:
        PublishValidationError: If ``text`` is blank.  Nothing is read or
            written in that case.
        StorageError, DocumentParseError: Propagated from the store.
    """
    if not payload.text.strip():
        raise PublishValidationError(EMPTY_TEXT_MESSAGE)

    entry = store.append_entry(
        NewEntryInput(
            language=payload.language,
            text=payload.text,
            source_text=payload.source_text,
            timezone=payload.timezone,
            city=payload.city,
            weather_summary=payload.weather_summary,
        )
    )

    paths = stale_paths(entry)
    if on_invalidate is not None:
        on_invalidate(paths)
    logger.info("Published %s, invalidated %s", entry.slug, ", ".join(paths))
    return PublishResult(entry=entry, invalidated_paths=paths)
