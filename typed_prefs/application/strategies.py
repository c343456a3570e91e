"""Read/write rules for each setting value kind.

Every ``ValueKind`` maps to one ``ValueStrategy``. Reads never raise: absent
keys, values of another primitive type, unknown enum variants and corrupt
blobs all resolve to the setting's initial value.

Numeric and boolean kinds read from the store's full key/value snapshot and
check the exact Python type, because ``bool`` is a subclass of ``int`` and a
lenient lookup would hand a stored ``True`` to an int setting.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from ..domain.enums import BlobFormat, ValueKind
from ..domain.exceptions import InvalidSettingError, SerializationError
from ..infrastructure.serialization import decode_value, encode_value, type_name, validate_value
from ..infrastructure.simple_logger import SimpleLogger
from ..ports.logger import LoggerPort
from ..ports.settings_store import SettingsStorePort

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

# Integers a store can persist: signed or unsigned 64-bit
MIN_STORED_INT = -(2**63)
MAX_STORED_INT = 2**64 - 1


def fits_stored_int(value: Any) -> bool:
    """Check if a value is an ``int`` (not a ``bool``) that stores can persist."""
    return type(value) is int and MIN_STORED_INT <= value <= MAX_STORED_INT


class ValueStrategy(ABC, Generic[T]):
    """Persistence rule for one value kind."""

    kind: ValueKind

    @abstractmethod
    def read(self, store: SettingsStorePort, key: str, initial: T) -> T:
        """Read the stored value, falling back to ``initial``."""
        ...

    @abstractmethod
    def write(self, store: SettingsStorePort, key: str, value: T) -> bool:
        """Write a value.

        Returns:
            True if the value was stored and should be published
        """
        ...

    def accepts(self, value: Any) -> bool:
        """Check if a value is valid for this kind (used for initial values)."""
        return True

    def normalize(self, value: T) -> T:
        """Convert an accepted value to the form reads hand back."""
        return value


class StringStrategy(ValueStrategy[str]):
    kind = ValueKind.STRING

    def read(self, store: SettingsStorePort, key: str, initial: str) -> str:
        value = store.string(key)
        return initial if value is None else value

    def write(self, store: SettingsStorePort, key: str, value: str) -> bool:
        store.set(key, value)
        return True

    def accepts(self, value: Any) -> bool:
        return isinstance(value, str)


class IntStrategy(ValueStrategy[int]):
    kind = ValueKind.INT

    def read(self, store: SettingsStorePort, key: str, initial: int) -> int:
        value = store.dictionary_representation().get(key)
        if type(value) is int:
            return value
        return initial

    def write(self, store: SettingsStorePort, key: str, value: int) -> bool:
        store.set(key, value)
        return True

    def accepts(self, value: Any) -> bool:
        return fits_stored_int(value)


class FloatStrategy(ValueStrategy[float]):
    """Floating point rule shared by the float and double kinds.

    Stored integers widen to float; booleans never do.
    """

    def __init__(self, kind: ValueKind = ValueKind.DOUBLE):
        self.kind = kind

    def read(self, store: SettingsStorePort, key: str, initial: float) -> float:
        value = store.dictionary_representation().get(key)
        if type(value) in (float, int):
            return float(value)
        return initial

    def write(self, store: SettingsStorePort, key: str, value: float) -> bool:
        store.set(key, float(value))
        return True

    def accepts(self, value: Any) -> bool:
        return type(value) is float or fits_stored_int(value)

    def normalize(self, value: float) -> float:
        return float(value)


class BoolStrategy(ValueStrategy[bool]):
    kind = ValueKind.BOOL

    def read(self, store: SettingsStorePort, key: str, initial: bool) -> bool:
        value = store.dictionary_representation().get(key)
        if type(value) is bool:
            return value
        return initial

    def write(self, store: SettingsStorePort, key: str, value: bool) -> bool:
        store.set(key, value)
        return True

    def accepts(self, value: Any) -> bool:
        return type(value) is bool


class DateStrategy(ValueStrategy[datetime]):
    kind = ValueKind.DATE

    def read(self, store: SettingsStorePort, key: str, initial: datetime) -> datetime:
        value = store.date(key)
        return initial if value is None else value

    def write(self, store: SettingsStorePort, key: str, value: datetime) -> bool:
        store.set(key, value)
        return True

    def accepts(self, value: Any) -> bool:
        return isinstance(value, datetime)


class RawValueStrategy(ValueStrategy[E]):
    """Rule for enums persisted through their ``str`` or ``int`` value.

    A stored value with no matching member reads as absent.
    """

    def __init__(self, enum_type: type[E], kind: ValueKind):
        if not (isinstance(enum_type, type) and issubclass(enum_type, Enum)):
            raise InvalidSettingError(f"{enum_type!r} is not an Enum type")
        if kind not in (ValueKind.RAW_STRING, ValueKind.RAW_INT):
            raise InvalidSettingError(f"{kind.value} is not a raw value kind")
        self.enum_type = enum_type
        self.kind = kind
        self._backing: type = str if kind == ValueKind.RAW_STRING else int

    def _backing_value(self, store: SettingsStorePort, key: str) -> Any | None:
        if self.kind == ValueKind.RAW_STRING:
            return store.string(key)
        value = store.dictionary_representation().get(key)
        return value if type(value) is int else None

    def read(self, store: SettingsStorePort, key: str, initial: E) -> E:
        raw = self._backing_value(store, key)
        if raw is None:
            return initial
        try:
            return self.enum_type(raw)
        except ValueError:
            return initial

    def write(self, store: SettingsStorePort, key: str, value: E) -> bool:
        store.set(key, self._backing(value.value))
        return True

    def accepts(self, value: Any) -> bool:
        if not isinstance(value, self.enum_type):
            return False
        if self._backing is int:
            return fits_stored_int(value.value)
        return type(value.value) is str


class CodableStrategy(ValueStrategy[T]):
    """Rule for structured values stored as an encoded blob.

    Decode and encode failures are logged with the type name and key. A
    failed encode leaves the store untouched and reports nothing to publish.
    """

    kind = ValueKind.CODABLE

    def __init__(
        self,
        value_type: Any,
        logger: LoggerPort | None = None,
        blob_format: BlobFormat = BlobFormat.JSON,
    ):
        self.value_type = value_type
        self.blob_format = blob_format
        self._logger = logger or SimpleLogger("typed_prefs")

    @property
    def type_name(self) -> str:
        return type_name(self.value_type)

    def _encode(self, value: T) -> bytes:
        return encode_value(value, self.value_type, self.blob_format)

    def normalize(self, value: T) -> T:
        """Convert lax input (a dict for a model, say) to ``value_type``.

        Values that do not validate are returned unchanged; ``write`` then
        logs them as an encode failure.
        """
        try:
            return validate_value(value, self.value_type)
        except SerializationError:
            return value

    def read(self, store: SettingsStorePort, key: str, initial: T) -> T:
        data = store.data(key)
        if data is None:
            return initial
        try:
            return decode_value(data, self.value_type, self.blob_format)
        except SerializationError as e:
            self._logger.warning(
                f"Failed to decode {self.type_name} for key '{key}'",
                key=key,
                type_name=self.type_name,
                error=str(e),
            )
            return initial

    def write(self, store: SettingsStorePort, key: str, value: T) -> bool:
        try:
            data = self._encode(value)
        except SerializationError as e:
            self._logger.warning(
                f"Failed to encode {self.type_name} for key '{key}'",
                key=key,
                type_name=self.type_name,
                error=str(e),
            )
            return False
        store.set(key, data)
        return True


class SetStrategy(CodableStrategy[frozenset]):
    """Rule for sets of ints or strings, stored as a sorted array blob."""

    def __init__(
        self,
        element_type: type,
        logger: LoggerPort | None = None,
        blob_format: BlobFormat = BlobFormat.JSON,
    ):
        if element_type not in (int, str):
            raise InvalidSettingError(f"Unsupported set element type {element_type!r}")
        super().__init__(frozenset[element_type], logger, blob_format)
        self.element_type = element_type
        self.kind = ValueKind.INT_SET if element_type is int else ValueKind.STRING_SET

    def _encode(self, value: frozenset) -> bytes:
        if not isinstance(value, set | frozenset):
            raise SerializationError(
                f"Expected a set, got {type(value).__name__}", type_name=self.type_name
            )
        try:
            ordered = sorted(value)
        except TypeError as e:
            raise SerializationError(str(e), type_name=self.type_name) from e
        return encode_value(ordered, list[self.element_type], self.blob_format)

    def accepts(self, value: Any) -> bool:
        return isinstance(value, set | frozenset) and all(
            type(item) is self.element_type for item in value
        )

    def normalize(self, value: frozenset) -> frozenset:
        return frozenset(value)


def strategy_for(
    kind: ValueKind,
    *,
    enum_type: type[Enum] | None = None,
    value_type: Any = None,
    logger: LoggerPort | None = None,
    blob_format: BlobFormat = BlobFormat.JSON,
) -> ValueStrategy[Any]:
    """Build the strategy for a value kind.

    Raises:
        InvalidSettingError: If a raw kind has no enum type or the codable kind no value type
    """
    if kind in (ValueKind.RAW_STRING, ValueKind.RAW_INT):
        if enum_type is None:
            raise InvalidSettingError(f"{kind.value} settings need an enum type")
        return RawValueStrategy(enum_type, kind)
    if kind == ValueKind.CODABLE:
        if value_type is None:
            raise InvalidSettingError("codable settings need a value type")
        return CodableStrategy(value_type, logger, blob_format)
    if kind == ValueKind.INT_SET:
        return SetStrategy(int, logger, blob_format)
    if kind == ValueKind.STRING_SET:
        return SetStrategy(str, logger, blob_format)
    return _SIMPLE_STRATEGIES[kind]()


_SIMPLE_STRATEGIES: dict[ValueKind, Any] = {
    ValueKind.STRING: StringStrategy,
    ValueKind.INT: IntStrategy,
    ValueKind.FLOAT: lambda: FloatStrategy(ValueKind.FLOAT),
    ValueKind.DOUBLE: lambda: FloatStrategy(ValueKind.DOUBLE),
    ValueKind.BOOL: BoolStrategy,
    ValueKind.DATE: DateStrategy,
}
