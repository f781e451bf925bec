"""Configuration loaded from .lingopress.toml and env vars.

Loading order: defaults → TOML file → env vars.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from lingopress.content.backends import (
    DEFAULT_BLOB_BASE_URL,
    DEFAULT_BLOB_KEY,
    DEFAULT_CONTENT_PATH,
    BlobConfig,
    StorageBackend,
    create_backend,
)
from lingopress.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".lingopress.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "lingopress" / "config.toml"


class StorageConfig(BaseModel):
    """[storage] section."""

    content_path: str = str(DEFAULT_CONTENT_PATH)
    blob_token: str = ""
    blob_base_url: str = DEFAULT_BLOB_BASE_URL
    blob_key: str = DEFAULT_BLOB_KEY
    timeout: float = 30.0

    @property
    def is_remote(self) -> bool:
        return bool(self.blob_token)


class LingopressConfig(BaseModel):
    """Top-level configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)

    def to_blob_config(self) -> BlobConfig:
        """Convert the [storage] section to BlobConfig for the blob backend."""
        return BlobConfig(
            token=self.storage.blob_token,
            base_url=self.storage.blob_base_url or DEFAULT_BLOB_BASE_URL,
            key=self.storage.blob_key or DEFAULT_BLOB_KEY,
            timeout=self.storage.timeout,
        )

    def create_backend(self) -> StorageBackend:
        """Build the process-wide storage backend for this configuration."""
        return create_backend(self.to_blob_config(), Path(self.storage.content_path))


def load_config(path: str | Path | None = None) -> LingopressConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .lingopress.toml in CWD
    3. ~/.config/lingopress/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged LingopressConfig.

    Raises:
        ConfigError: If a value in the file or environment is invalid.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    try:
        config = LingopressConfig.model_validate(data) if data else LingopressConfig()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    return _apply_env_vars(config)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: LingopressConfig) -> LingopressConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "BLOB_READ_WRITE_TOKEN": ("storage", "blob_token"),
        "BLOB_STORE_URL": ("storage", "blob_base_url"),
        "CONTENT_BLOB_KEY": ("storage", "blob_key"),
        "LINGOPRESS_CONTENT_PATH": ("storage", "content_path"),
        "LINGOPRESS_BLOB_TIMEOUT": ("storage", "timeout"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value:
            data[section][field] = value

    try:
        return LingopressConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration from environment: {exc}") from exc
