"""Content domain — entry models, storage backends and the content store."""

from lingopress.content.backends import (
    BlobBackend,
    BlobConfig,
    FilesystemBackend,
    RequestScopedBackend,
    StorageBackend,
    create_backend,
)
from lingopress.content.models import (
    LANGUAGES,
    ContentDocument,
    ContentEntry,
    Language,
    NewEntryInput,
)
from lingopress.content.store import ContentStore, create_slug

__all__ = [
    "LANGUAGES",
    "BlobBackend",
    "BlobConfig",
    "ContentDocument",
    "ContentEntry",
    "ContentStore",
    "FilesystemBackend",
    "Language",
    "NewEntryInput",
    "RequestScopedBackend",
    "StorageBackend",
    "create_backend",
    "create_slug",
]
