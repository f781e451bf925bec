"""Tests for the publish action."""

import re
from datetime import UTC, datetime

import pytest

from lingopress.content.backends import StorageBackend
from lingopress.content.models import ContentDocument, Language
from lingopress.content.store import ContentStore
from lingopress.errors import PublishValidationError, StorageError
from lingopress.publish import EMPTY_TEXT_MESSAGE, PublishPayload, publish_entry, stale_paths


def _payload(text: str = "Hello", language: str = "en") -> PublishPayload:
    return PublishPayload(
        language=language,
        text=text,
        source_text="你好",
        timezone="UTC",
        city="Tokyo",
        weather_summary="Sunny",
    )


class _FailingBackend(StorageBackend):
    def read(self) -> ContentDocument:
        return ContentDocument.empty()

    def write(self, document: ContentDocument) -> None:
        raise StorageError("Failed to persist content data (status 503)", status=503)


class TestPublishEntry:
    def test_publishes_entry(self, memory_backend):
        store = ContentStore(memory_backend)
        before = datetime.now(tz=UTC)
        before = before.replace(microsecond=before.microsecond // 1000 * 1000)

        result = publish_entry(_payload(), store)

        entry = result.entry
        assert entry.language == Language.EN
        assert entry.id
        assert re.fullmatch(r"en-\d{17}", entry.slug)
        assert datetime.fromisoformat(entry.published_at) >= before
        assert store.list_entries("en")[0] == entry

    def test_copies_payload_fields(self, store):
        entry = publish_entry(_payload(), store).entry
        assert entry.text == "Hello"
        assert entry.source_text == "你好"
        assert entry.timezone == "UTC"
        assert entry.city == "Tokyo"
        assert entry.weather_summary == "Sunny"

    def test_text_stored_untrimmed(self, store):
        entry = publish_entry(_payload("  Hello  "), store).entry
        assert entry.text == "  Hello  "

    def test_invalidated_paths(self, store):
        result = publish_entry(_payload(language="jp"), store)
        assert result.invalidated_paths == ["/jp", f"/jp/{result.entry.slug}"]
        assert stale_paths(result.entry) == result.invalidated_paths

    def test_on_invalidate_called(self, store):
        calls: list[list[str]] = []
        result = publish_entry(_payload(), store, on_invalidate=calls.append)
        assert calls == [result.invalidated_paths]

    def test_newest_first_after_several(self, store):
        publish_entry(_payload("first"), store)
        publish_entry(_payload("second"), store)
        assert [e.text for e in store.list_entries("en")] == ["second", "first"]


class TestPublishValidation:
    @pytest.mark.parametrize("text", ["", "   ", "\n\t  "])
    def test_blank_text_rejected(self, memory_backend, text):
        store = ContentStore(memory_backend)
        with pytest.raises(PublishValidationError, match=EMPTY_TEXT_MESSAGE):
            publish_entry(_payload(text), store)

        # Rejected before any storage I/O.
        assert memory_backend.reads == 0
        assert memory_backend.writes == 0
        assert store.list_entries("en") == []

    def test_on_invalidate_not_called_when_rejected(self, store):
        calls: list[list[str]] = []
        with pytest.raises(PublishValidationError):
            publish_entry(_payload(" "), store, on_invalidate=calls.append)
        assert calls == []


class TestPublishStorageFailure:
    def test_storage_error_propagates(self):
        calls: list[list[str]] = []
        store = ContentStore(_FailingBackend())
        with pytest.raises(StorageError) as exc_info:
            publish_entry(_payload(), store, on_invalidate=calls.append)
        assert exc_info.value.status == 503
        assert calls == []


class TestPublishPayload:
    def test_accepts_camel_case(self):
        payload = PublishPayload.model_validate(
            {
                "language": "zh",
                "text": "你好",
                "sourceText": "你好",
                "timezone": "Asia/Shanghai",
                "city": "上海",
                "weatherSummary": "多云",
            }
        )
        assert payload.language == Language.ZH
        assert payload.weather_summary == "多云"

    def test_rejects_unknown_language(self):
        with pytest.raises(ValueError):
            PublishPayload(language="fr", text="Bonjour")
