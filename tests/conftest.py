"""Shared fixtures: an in-memory storage backend and a deterministic clock."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from lingopress.content.backends import StorageBackend
from lingopress.content.models import ContentDocument
from lingopress.content.store import ContentStore

ENV_VARS = (
    "BLOB_READ_WRITE_TOKEN",
    "BLOB_STORE_URL",
    "CONTENT_BLOB_KEY",
    "LINGOPRESS_CONTENT_PATH",
    "LINGOPRESS_BLOB_TIMEOUT",
)


class InMemoryBackend(StorageBackend):
    """Counts reads and writes; initializes the empty document like the real backends."""

    def __init__(self, document: ContentDocument | None = None) -> None:
        self.document = document
        self.reads = 0
        self.writes = 0

    def read(self) -> ContentDocument:
        self.reads += 1
        if self.document is None:
            self.write(ContentDocument.empty())
        assert self.document is not None
        return self.document

    def write(self, document: ContentDocument) -> None:
        self.writes += 1
        self.document = document


class TickingClock:
    """Returns a fixed start instant, advancing by *step* on every call."""

    def __init__(
        self,
        start: datetime = datetime(2026, 10, 19, 8, 15, 30, 123000, tzinfo=UTC),
        step: timedelta = timedelta(milliseconds=1),
    ) -> None:
        self._now = start
        self._step = step

    def __call__(self) -> datetime:
        now = self._now
        self._now += self._step
        return now


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store(memory_backend: InMemoryBackend, clock: TickingClock) -> ContentStore:
    return ContentStore(memory_backend, clock=clock)
