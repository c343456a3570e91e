"""Configuration objects for settings stores and the settings layer."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.enums import BlobFormat

if TYPE_CHECKING:
    from ..ports.settings_store import SettingsStorePort

ENV_STORE_PATH = "TYPED_PREFS_STORE_PATH"
ENV_LOG_LEVEL = "TYPED_PREFS_LOG_LEVEL"
ENV_BLOB_FORMAT = "TYPED_PREFS_BLOB_FORMAT"


def _parse_path(v: Any) -> Path | None:
    if v is None or isinstance(v, Path):
        return v
    if isinstance(v, str):
        if not v.strip():
            raise ValueError("Store path cannot be empty")
        return Path(v).expanduser()
    raise ValueError(f"Invalid path type: {type(v)}")


class FileStoreConfig(BaseModel):
    """Configuration for the file-backed settings store."""

    model_config = ConfigDict(
        extra="forbid",
        strict=True,
        validate_assignment=True,
    )

    path: Path = Field(..., description="File the store is persisted to")
    create_parents: bool = Field(
        default=True,
        description="Create missing parent directories on first write",
    )

    @field_validator("path", mode="before")
    @classmethod
    def parse_path(cls, v: Any) -> Path | None:
        """Accept plain strings and expand ``~``."""
        return _parse_path(v)


class TypedPrefsConfig(BaseModel):
    """Top-level configuration for wiring settings to a store."""

    model_config = ConfigDict(
        extra="forbid",
        strict=True,
        validate_assignment=True,
    )

    store_path: Path | None = Field(
        default=None,
        description="Persist settings to this file; in-memory when unset",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Level for the settings logger",
    )
    blob_format: BlobFormat = Field(
        default=BlobFormat.JSON,
        description="Encoding of structured values",
    )

    @field_validator("store_path", mode="before")
    @classmethod
    def parse_store_path(cls, v: Any) -> Path | None:
        """Accept plain strings and expand ``~``."""
        return _parse_path(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("blob_format", mode="before")
    @classmethod
    def parse_blob_format(cls, v: Any) -> Any:
        """Accept the format name as a string."""
        if isinstance(v, str):
            return BlobFormat(v.strip().lower())
        return v

    @property
    def logging_level(self) -> int:
        """The configured level as a ``logging`` constant."""
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> TypedPrefsConfig:
        """Build configuration from ``TYPED_PREFS_*`` environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        if env.get(ENV_STORE_PATH):
            values["store_path"] = env[ENV_STORE_PATH]
        if env.get(ENV_LOG_LEVEL):
            values["log_level"] = env[ENV_LOG_LEVEL]
        if env.get(ENV_BLOB_FORMAT):
            values["blob_format"] = env[ENV_BLOB_FORMAT]
        return cls(**values)

    def create_store(self) -> SettingsStorePort:
        """Create the store this configuration describes."""
        from .file_store import FileSettingsStore
        from .in_memory_store import InMemorySettingsStore

        if self.store_path is None:
            return InMemorySettingsStore()
        return FileSettingsStore(FileStoreConfig(path=self.store_path))
