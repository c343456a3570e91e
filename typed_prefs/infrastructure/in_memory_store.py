"""In-memory implementation of the SettingsStorePort.

Process-local store used for tests and for settings that need no persistence.
"""

import threading
from typing import Any

from ..domain.exceptions import UnsupportedValueError
from ..ports.settings_store import SettingsStorePort, is_primitive


class InMemorySettingsStore(SettingsStorePort):
    """Dictionary-backed settings store safe for use from several threads."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        """Initialize the in-memory storage.

        Args:
            initial: Optional key/values to seed the store with
        """
        self._lock = threading.RLock()
        self._storage: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any | None:
        """Get the raw stored value."""
        with self._lock:
            value = self._storage.get(key)
        return list(value) if isinstance(value, list) else value

    def set(self, key: str, value: Any) -> None:
        """Store a primitive value."""
        if not is_primitive(value):
            raise UnsupportedValueError(key, type(value))
        with self._lock:
            self._storage[key] = list(value) if isinstance(value, list) else value

    def remove(self, key: str) -> None:
        """Remove a key if present."""
        with self._lock:
            self._storage.pop(key, None)

    def keys(self) -> list[str]:
        """List all stored keys."""
        with self._lock:
            return list(self._storage)

    def dictionary_representation(self) -> dict[str, Any]:
        """Get a snapshot of every stored key and value."""
        with self._lock:
            return dict(self._storage)

    def wipe(self) -> None:
        """Remove every key (useful for testing)."""
        with self._lock:
            self._storage.clear()
