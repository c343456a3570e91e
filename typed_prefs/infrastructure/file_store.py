"""File-backed implementation of the SettingsStorePort.

The whole store is kept in memory and written through to a single MessagePack
file on every change. Aware datetimes use MessagePack's timestamp extension;
naive datetimes are kept naive through a private extension type.
"""

from __future__ import annotations

import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

import msgpack

from ..domain.exceptions import StoreError, UnsupportedValueError
from ..ports.logger import LoggerPort
from ..ports.settings_store import SettingsStorePort, is_primitive
from .config import FileStoreConfig
from .simple_logger import SimpleLogger

NAIVE_DATETIME_EXT = 1


def _default(obj: Any) -> Any:
    if isinstance(obj, datetime) and obj.tzinfo is None:
        return msgpack.ExtType(NAIVE_DATETIME_EXT, obj.isoformat().encode())
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


def _ext_hook(code: int, data: bytes) -> Any:
    if code == NAIVE_DATETIME_EXT:
        return datetime.fromisoformat(data.decode())
    return msgpack.ExtType(code, data)


def pack_store(data: dict[str, Any]) -> bytes:
    """Pack a store snapshot to MessagePack bytes."""
    return bytes(msgpack.packb(data, use_bin_type=True, datetime=True, default=_default))


def unpack_store(payload: bytes) -> dict[str, Any]:
    """Unpack a store snapshot written by ``pack_store``."""
    data = msgpack.unpackb(payload, raw=False, timestamp=3, ext_hook=_ext_hook)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a map at top level, got {type(data).__name__}")
    return data


class FileSettingsStore(SettingsStorePort):
    """Settings store persisted to a MessagePack file.

    Writes are flushed to disk before ``set``/``remove`` return, using a
    temporary file and ``os.replace`` so a crash never leaves a half-written
    file behind.
    """

    def __init__(
        self,
        config: FileStoreConfig | str | Path,
        logger: LoggerPort | None = None,
    ):
        """Initialize the store and load the file if it exists.

        Args:
            config: Store configuration, or just the file path
            logger: Optional logger port. If not provided, uses simple logger.

        Raises:
            StoreError: If an existing file cannot be read or parsed
        """
        if not isinstance(config, FileStoreConfig):
            config = FileStoreConfig(path=config)
        self._config = config
        self._logger = logger or SimpleLogger("typed_prefs.file_store")
        self._lock = threading.RLock()
        self._storage: dict[str, Any] = self._load()

    @property
    def path(self) -> Path:
        return self._config.path

    def _load(self) -> dict[str, Any]:
        path = self._config.path
        if not path.exists():
            self._logger.debug("Settings file does not exist yet", path=str(path))
            return {}

        try:
            payload = path.read_bytes()
        except OSError as e:
            raise StoreError(f"Cannot read settings file {path}: {e}", operation="load") from e
        if not payload:
            return {}

        try:
            data = unpack_store(payload)
        except Exception as e:
            raise StoreError(f"Corrupt settings file {path}: {e}", operation="load") from e

        self._logger.debug("Loaded settings file", path=str(path), count=len(data))
        return data

    def _flush(self, operation: str, key: str) -> None:
        path = self._config.path
        try:
            payload = pack_store(self._storage)
        except (TypeError, ValueError, OverflowError) as e:
            raise StoreError(
                f"Cannot encode settings file {path}: {e}", key=key, operation=operation
            ) from e
        try:
            if self._config.create_parents:
                path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(
                f"Cannot write settings file {path}: {e}", key=key, operation=operation
            ) from e

    def get(self, key: str) -> Any | None:
        """Get the raw stored value."""
        with self._lock:
            value = self._storage.get(key)
        return list(value) if isinstance(value, list) else value

    def set(self, key: str, value: Any) -> None:
        """Store a primitive value and write the file."""
        if not is_primitive(value):
            raise UnsupportedValueError(key, type(value))
        with self._lock:
            previous = self._storage.get(key)
            had_key = key in self._storage
            self._storage[key] = list(value) if isinstance(value, list) else value
            try:
                self._flush("set", key)
            except StoreError:
                # Keep memory and disk in agreement
                if had_key:
                    self._storage[key] = previous
                else:
                    self._storage.pop(key, None)
                raise

    def remove(self, key: str) -> None:
        """Remove a key and write the file."""
        with self._lock:
            if key not in self._storage:
                return
            previous = self._storage.pop(key)
            try:
                self._flush("remove", key)
            except StoreError:
                self._storage[key] = previous
                raise

    def keys(self) -> list[str]:
        """List all stored keys."""
        with self._lock:
            return list(self._storage)

    def dictionary_representation(self) -> dict[str, Any]:
        """Get a snapshot of every stored key and value."""
        with self._lock:
            return dict(self._storage)

    def wipe(self) -> int:
        """Remove every key.

        Returns:
            Number of keys removed
        """
        with self._lock:
            if not self._storage:
                return 0
            previous = self._storage
            self._storage = {}
            try:
                self._flush("wipe", "*")
            except StoreError:
                self._storage = previous
                raise
            return len(previous)

    def reload(self) -> None:
        """Re-read the file, dropping in-memory state."""
        with self._lock:
            self._storage = self._load()
