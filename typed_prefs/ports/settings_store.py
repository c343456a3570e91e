"""Settings store interface - Port definition for the key-value preferences store."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

# Primitive types every store adapter holds natively. Lists of these are allowed too.
PRIMITIVE_TYPES: tuple[type, ...] = (str, int, float, bool, datetime, bytes)


def is_primitive(value: Any) -> bool:
    """Check if a value can be held natively by a settings store."""
    if isinstance(value, list):
        return all(isinstance(item, PRIMITIVE_TYPES) for item in value)
    return isinstance(value, PRIMITIVE_TYPES)


class SettingsStorePort(ABC):
    """Abstract interface for a synchronous key-value preferences store.

    Every call is blocking. A missing key is never an error: lookups return
    None. Writes and removals are visible to the next lookup in the same process.
    The typed lookups never coerce between primitive types; a key holding an
    ``int`` reads as None through ``string()``.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Get the raw stored value.

        Args:
            key: The key to retrieve

        Returns:
            The stored primitive, or None if absent
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a primitive value.

        Args:
            key: The key to store under
            value: A str, int, float, bool, datetime, bytes or a list of those

        Raises:
            UnsupportedValueError: If the value is not a native primitive
        """
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key. Removing a missing key does nothing."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """List all stored keys."""
        ...

    @abstractmethod
    def dictionary_representation(self) -> dict[str, Any]:
        """Get a snapshot of every stored key and value.

        Returns:
            A new dictionary; mutating it does not touch the store
        """
        ...

    def contains(self, key: str) -> bool:
        """Check if a key is stored."""
        return self.get(key) is not None

    def string(self, key: str) -> str | None:
        """Get a value only if it is stored as a string."""
        value = self.get(key)
        return value if isinstance(value, str) else None

    def data(self, key: str) -> bytes | None:
        """Get a value only if it is stored as a byte blob."""
        value = self.get(key)
        return value if isinstance(value, bytes) else None

    def date(self, key: str) -> datetime | None:
        """Get a value only if it is stored as a datetime."""
        value = self.get(key)
        return value if isinstance(value, datetime) else None
