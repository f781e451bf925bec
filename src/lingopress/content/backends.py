"""Storage backends for the content document.

Two concrete backends persist the whole document as one JSON blob:

- FilesystemBackend keeps it in a local file (``content/content.json``).
- BlobBackend keeps it in a remote key-value blob store reached over HTTPS
  with bearer-token auth.

create_backend() picks one at process start from configuration.  Each
logical request wraps the chosen backend in a RequestScopedBackend so a
list-then-fetch sequence issues at most one underlying read.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel

from lingopress.content.models import ContentDocument
from lingopress.errors import StorageError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_PATH = Path("content") / "content.json"
DEFAULT_BLOB_BASE_URL = "https://blob.vercel-storage.com"
DEFAULT_BLOB_KEY = "content/content.json"
BLOB_API_VERSION = "1"


class StorageBackend(ABC):
    """Reads and writes the whole content document."""

    @abstractmethod
    def read(self) -> ContentDocument:
        """Return the stored document, creating an empty one if absent."""

    @abstractmethod
    def write(self, document: ContentDocument) -> None:
        """Replace the stored document."""


# ── Filesystem ───────────────────────────────────────────────────


class FilesystemBackend(StorageBackend):
    """JSON file on local disk, replaced atomically on every write."""

    def __init__(self, path: Path | str = DEFAULT_CONTENT_PATH) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> ContentDocument:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No content document at %s, initializing an empty one", self._path)
            document = ContentDocument.empty()
            self.write(document)
            return document
        except OSError as exc:
            raise StorageError(f"Failed to read content data from {self._path}: {exc}") from exc
        return ContentDocument.from_json(raw)

    def write(self, document: ContentDocument) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(document.to_json())
                os.chmod(tmp_name, self._file_mode())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Failed to persist content data to {self._path}: {exc}") from exc

    def _file_mode(self) -> int:
        """Mode of the existing file, or the umask default for a new one."""
        try:
            return stat.S_IMODE(self._path.stat().st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask


# ── Remote blob store ────────────────────────────────────────────


class BlobConfig(BaseModel):
    """Connection settings for the remote blob store."""

    token: str = ""
    base_url: str = DEFAULT_BLOB_BASE_URL
    key: str = DEFAULT_BLOB_KEY
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    @property
    def url(self) -> str:
        """Base URL plus the key, each key segment percent-encoded."""
        base = self.base_url.rstrip("/")
        path = "/".join(urllib.parse.quote(segment, safe="") for segment in self.key.split("/"))
        return f"{base}/{path}"


class BlobBackend(StorageBackend):
    """Document stored under one key of an HTTP blob store.

    A 404 on GET means the document was never created: the empty document is
    PUT and returned.  Any other failure raises StorageError; no retries.
    """

    def __init__(self, config: BlobConfig) -> None:
        if not config.is_configured:
            raise StorageError("Missing BLOB_READ_WRITE_TOKEN for blob storage")
        self.config = config
        self.url = config.url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "x-vercel-blob-version": BLOB_API_VERSION,
        }

    def read(self) -> ContentDocument:
        req = urllib.request.Request(self.url, method="GET", headers=self._headers())
        logger.debug("GET %s", self.url)
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                if not 200 <= resp.status < 300:
                    raise StorageError(
                        f"Failed to read content data (status {resp.status})", status=resp.status
                    )
                body = resp.read()
        except urllib.error.HTTPError as exc:
            if exc.code == 404:
                exc.close()
                logger.info("No content document at %s, initializing an empty one", self.url)
                document = ContentDocument.empty()
                self.write(document)
                return document
            raise StorageError(
                f"Failed to read content data (status {exc.code})", status=exc.code
            ) from exc
        except urllib.error.URLError as exc:
            raise StorageError(f"Failed to read content data: {exc.reason}") from exc
        return ContentDocument.from_json(body)

    def write(self, document: ContentDocument) -> None:
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        req = urllib.request.Request(
            self.url,
            data=document.to_json().encode("utf-8"),
            method="PUT",
            headers=headers,
        )
        logger.debug("PUT %s", self.url)
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                if not 200 <= resp.status < 300:
                    raise StorageError(
                        f"Failed to persist content data (status {resp.status})",
                        status=resp.status,
                    )
        except urllib.error.HTTPError as exc:
            raise StorageError(
                f"Failed to persist content data (status {exc.code})", status=exc.code
            ) from exc
        except urllib.error.URLError as exc:
            raise StorageError(f"Failed to persist content data: {exc.reason}") from exc


# ── Request scope ────────────────────────────────────────────────


class RequestScopedBackend(StorageBackend):
    """Memoizes the first read for the lifetime of one request.

    Writes go straight through and refresh the memo.  Build a new wrapper
    per request; nothing is shared between wrappers.
    """

    def __init__(self, inner: StorageBackend) -> None:
        self._inner = inner
        self._document: ContentDocument | None = None

    def read(self) -> ContentDocument:
        if self._document is None:
            self._document = self._inner.read()
        return self._document

    def write(self, document: ContentDocument) -> None:
        self._inner.write(document)
        self._document = document


def create_backend(
    blob_config: BlobConfig | None = None,
    content_path: Path | str = DEFAULT_CONTENT_PATH,
) -> StorageBackend:
    """Select the process-wide backend: blob store when a token is configured."""
    if blob_config is not None and blob_config.is_configured:
        logger.info("Using remote blob storage at %s", blob_config.url)
        return BlobBackend(blob_config)
    logger.info("Using filesystem storage at %s", content_path)
    return FilesystemBackend(content_path)
