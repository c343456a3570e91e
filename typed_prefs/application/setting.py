"""Typed settings bound to a key in a settings store.

A setting pairs a ``SettingDefinition`` with the ``ValueStrategy`` for its
kind and a latest-value broadcast. Reads and writes never raise for data
problems; anything unreadable resolves to the initial value.

Example:
    >>> store = InMemorySettingsStore()
    >>> retries = IntSetting(store, "retry_count", 3)
    >>> retries.current
    3
    >>> retries.set(7)
    >>> retries.read()
    7
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from ..domain.enums import BlobFormat, ValueKind
from ..domain.exceptions import InvalidSettingError
from ..domain.models import SettingDefinition
from ..infrastructure.simple_logger import SimpleLogger
from ..infrastructure.system_clock import SystemClock
from ..ports.clock import ClockPort
from ..ports.logger import LoggerPort
from ..ports.settings_store import SettingsStorePort
from .broadcast import CurrentValueBroadcast, Subscription
from .strategies import (
    BoolStrategy,
    CodableStrategy,
    DateStrategy,
    FloatStrategy,
    IntStrategy,
    RawValueStrategy,
    SetStrategy,
    StringStrategy,
    ValueStrategy,
)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


class TypedSetting(Generic[T]):
    """A named, typed value persisted under one store key.

    Args:
        store: Store the value is persisted in
        key: Store key, unique per setting (collisions are not detected)
        initial: Value returned while nothing valid is stored
        strategy: Read/write rule for the value kind
        logger: Optional logger for diagnostics

    Raises:
        InvalidSettingError: If the key is empty or ``initial`` does not fit the kind
    """

    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: T,
        strategy: ValueStrategy[T],
        logger: LoggerPort | None = None,
    ):
        if not strategy.accepts(initial):
            raise InvalidSettingError(
                f"Initial value {initial!r} does not fit {strategy.kind.value} setting '{key}'",
                key=key,
            )
        try:
            self._definition = SettingDefinition(
                key=key, initial=strategy.normalize(initial), kind=strategy.kind
            )
        except ValidationError as e:
            raise InvalidSettingError(f"Invalid setting key {key!r}: {e}", key=key) from e

        self._store = store
        self._strategy = strategy
        self._logger = logger or SimpleLogger("typed_prefs")
        # Serializes read-modify-write helpers on this setting object
        self._lock = threading.RLock()
        self._publisher: CurrentValueBroadcast[T] = CurrentValueBroadcast(
            self.read, logger=self._logger, name=str(self._definition)
        )

    @property
    def definition(self) -> SettingDefinition:
        return self._definition

    @property
    def key(self) -> str:
        return self._definition.key

    @property
    def initial(self) -> T:
        """A fresh copy of the initial value; mutating it never changes the default."""
        return copy.deepcopy(self._definition.initial)

    @property
    def kind(self) -> ValueKind:
        return self._definition.kind

    @property
    def store(self) -> SettingsStorePort:
        return self._store

    @property
    def publisher(self) -> CurrentValueBroadcast[T]:
        """Latest-value broadcast fed by every successful write."""
        return self._publisher

    @property
    def current(self) -> T:
        """The current value; same as ``read()``."""
        return self.read()

    @property
    def is_set(self) -> bool:
        """Whether the key currently exists in the store."""
        return self._store.contains(self.key)

    def read(self) -> T:
        """Read the stored value, or ``initial`` if absent or unreadable."""
        return self._strategy.read(self._store, self.key, self.initial)

    def set(self, value: T) -> None:
        """Persist a value and notify subscribers.

        Values that do not fit the setting's kind, and structured values that
        fail to encode, are logged and dropped; the store is left unchanged
        and nothing is published.
        """
        if not self._strategy.accepts(value):
            self._logger.warning(
                f"Rejected {type(value).__name__} value for {self.kind.value} "
                f"setting '{self.key}'",
                key=self.key,
                kind=self.kind.value,
            )
            return
        value = self._strategy.normalize(value)
        if not self._strategy.write(self._store, self.key, value):
            return
        self._logger.debug("Setting written", key=self.key, kind=self.kind.value)
        self._publisher.send(value)

    def clear(self) -> None:
        """Remove the stored value. Does not notify subscribers."""
        self._store.remove(self.key)

    def reset(self) -> None:
        """Write ``initial`` back and notify subscribers."""
        self.set(self.initial)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """Receive the current value now and every successfully written value after.

        Keep the returned handle; dropping it detaches the callback.
        """
        return self._publisher.subscribe(callback)

    def update(self, transform: Callable[[T], T]) -> T:
        """Read, transform and write back under this setting's lock.

        Returns:
            The value passed to ``set``
        """
        with self._lock:
            value = transform(self.read())
            self.set(value)
            return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r}, initial={self.initial!r})"


class StringSetting(TypedSetting[str]):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: str = "",
        logger: LoggerPort | None = None,
    ):
        super().__init__(store, key, initial, StringStrategy(), logger)


class IntSetting(TypedSetting[int]):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: int = 0,
        logger: LoggerPort | None = None,
    ):
        super().__init__(store, key, initial, IntStrategy(), logger)


class FloatSetting(TypedSetting[float]):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: float = 0.0,
        logger: LoggerPort | None = None,
    ):
        super().__init__(store, key, initial, FloatStrategy(ValueKind.FLOAT), logger)


class DoubleSetting(TypedSetting[float]):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: float = 0.0,
        logger: LoggerPort | None = None,
    ):
        super().__init__(store, key, initial, FloatStrategy(ValueKind.DOUBLE), logger)


class BoolSetting(TypedSetting[bool]):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: bool = False,
        logger: LoggerPort | None = None,
    ):
        super().__init__(store, key, initial, BoolStrategy(), logger)

    def toggle(self) -> bool:
        """Write the negation of the current value and return it."""
        return self.update(lambda value: not value)


class DateSetting(TypedSetting[datetime]):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: datetime,
        logger: LoggerPort | None = None,
        clock: ClockPort | None = None,
    ):
        super().__init__(store, key, initial, DateStrategy(), logger)
        self._clock = clock or SystemClock()

    def set_now(self) -> datetime:
        """Stamp the setting with the clock's current time and return it."""
        now = self._clock.now()
        self.set(now)
        return now


class RawStringSetting(TypedSetting[E]):
    """Enum setting persisted through the member's string value."""

    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: E,
        enum_type: type[E] | None = None,
        logger: LoggerPort | None = None,
    ):
        strategy = RawValueStrategy(enum_type or type(initial), ValueKind.RAW_STRING)
        super().__init__(store, key, initial, strategy, logger)

    @property
    def enum_type(self) -> type[E]:
        return self._strategy.enum_type


class RawIntSetting(TypedSetting[E]):
    """Enum setting persisted through the member's integer value."""

    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: E,
        enum_type: type[E] | None = None,
        logger: LoggerPort | None = None,
    ):
        strategy = RawValueStrategy(enum_type or type(initial), ValueKind.RAW_INT)
        super().__init__(store, key, initial, strategy, logger)

    @property
    def enum_type(self) -> type[E]:
        return self._strategy.enum_type


class CodableSetting(TypedSetting[T]):
    """Structured value persisted as an encoded blob.

    ``value_type`` is anything pydantic can validate and serialize: models,
    dataclasses, typed dicts, or collections of those.
    """

    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: T,
        value_type: Any = None,
        logger: LoggerPort | None = None,
        blob_format: BlobFormat = BlobFormat.JSON,
    ):
        strategy = CodableStrategy(value_type or type(initial), logger, blob_format)
        super().__init__(store, key, initial, strategy, logger)

    @property
    def value_type(self) -> Any:
        return self._strategy.value_type


class _SetSetting(TypedSetting[frozenset]):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: Iterable[Any],
        element_type: type,
        logger: LoggerPort | None = None,
        blob_format: BlobFormat = BlobFormat.JSON,
    ):
        strategy = SetStrategy(element_type, logger, blob_format)
        super().__init__(store, key, frozenset(initial), strategy, logger)

    def insert(self, element: Any) -> frozenset:
        """Add an element and write the set back."""
        return self.update(lambda current: current | {element})

    def remove(self, element: Any) -> frozenset:
        """Discard an element and write the set back."""
        return self.update(lambda current: current - {element})

    def __contains__(self, element: object) -> bool:
        return element in self.read()


class IntSetSetting(_SetSetting):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: Iterable[int] = (),
        logger: LoggerPort | None = None,
        blob_format: BlobFormat = BlobFormat.JSON,
    ):
        super().__init__(store, key, initial, int, logger, blob_format)


class StringSetSetting(_SetSetting):
    def __init__(
        self,
        store: SettingsStorePort,
        key: str,
        initial: Iterable[str] = (),
        logger: LoggerPort | None = None,
        blob_format: BlobFormat = BlobFormat.JSON,
    ):
        super().__init__(store, key, initial, str, logger, blob_format)
