"""Factory for settings sharing one store, logger and clock."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from ..domain.enums import BlobFormat
from ..infrastructure.simple_logger import SimpleLogger
from ..infrastructure.system_clock import SystemClock
from .setting import (
    BoolSetting,
    CodableSetting,
    DateSetting,
    DoubleSetting,
    FloatSetting,
    IntSetSetting,
    IntSetting,
    RawIntSetting,
    RawStringSetting,
    StringSetSetting,
    StringSetting,
    TypedSetting,
)

if TYPE_CHECKING:
    from ..infrastructure.config import TypedPrefsConfig
    from ..ports.clock import ClockPort
    from ..ports.logger import LoggerPort
    from ..ports.settings_store import SettingsStorePort

S = TypeVar("S", bound=TypedSetting[Any])
E = TypeVar("E", bound=Enum)


class SettingsFactory:
    """Builds typed settings bound to a single store.

    The factory remembers the keys it has handed out and logs a warning when
    one is defined twice. The second definition is still created; keeping keys
    unique stays the caller's job.
    """

    def __init__(
        self,
        store: SettingsStorePort,
        logger: LoggerPort | None = None,
        clock: ClockPort | None = None,
        blob_format: BlobFormat = BlobFormat.JSON,
    ):
        self._store = store
        self._logger = logger or SimpleLogger("typed_prefs")
        self._clock = clock or SystemClock()
        self._blob_format = blob_format
        self._lock = threading.Lock()
        self._settings: dict[str, TypedSetting[Any]] = {}

    @classmethod
    def from_config(cls, config: TypedPrefsConfig) -> SettingsFactory:
        """Create a factory, its store and its logger from configuration."""
        logger = SimpleLogger("typed_prefs", level=config.logging_level)
        return cls(config.create_store(), logger=logger, blob_format=config.blob_format)

    @property
    def store(self) -> SettingsStorePort:
        return self._store

    @property
    def settings(self) -> dict[str, TypedSetting[Any]]:
        """Settings created so far, by key (latest definition wins)."""
        with self._lock:
            return dict(self._settings)

    def _register(self, setting: S) -> S:
        with self._lock:
            existing = self._settings.get(setting.key)
            self._settings[setting.key] = setting
        if existing is not None:
            self._logger.warning(
                f"Key '{setting.key}' is already used by {existing!r}",
                key=setting.key,
                kind=setting.kind.value,
            )
        return setting

    def string(self, key: str, initial: str = "") -> StringSetting:
        return self._register(StringSetting(self._store, key, initial, self._logger))

    def integer(self, key: str, initial: int = 0) -> IntSetting:
        return self._register(IntSetting(self._store, key, initial, self._logger))

    def floating(self, key: str, initial: float = 0.0) -> FloatSetting:
        return self._register(FloatSetting(self._store, key, initial, self._logger))

    def double(self, key: str, initial: float = 0.0) -> DoubleSetting:
        return self._register(DoubleSetting(self._store, key, initial, self._logger))

    def boolean(self, key: str, initial: bool = False) -> BoolSetting:
        return self._register(BoolSetting(self._store, key, initial, self._logger))

    def date(self, key: str, initial: datetime) -> DateSetting:
        return self._register(
            DateSetting(self._store, key, initial, self._logger, clock=self._clock)
        )

    def raw_string(
        self, key: str, initial: E, enum_type: type[E] | None = None
    ) -> RawStringSetting[E]:
        return self._register(
            RawStringSetting(self._store, key, initial, enum_type, self._logger)
        )

    def raw_int(
        self, key: str, initial: E, enum_type: type[E] | None = None
    ) -> RawIntSetting[E]:
        return self._register(RawIntSetting(self._store, key, initial, enum_type, self._logger))

    def codable(self, key: str, initial: Any, value_type: Any = None) -> CodableSetting[Any]:
        return self._register(
            CodableSetting(
                self._store, key, initial, value_type, self._logger, self._blob_format
            )
        )

    def int_set(self, key: str, initial: Iterable[int] = ()) -> IntSetSetting:
        return self._register(
            IntSetSetting(self._store, key, initial, self._logger, self._blob_format)
        )

    def string_set(self, key: str, initial: Iterable[str] = ()) -> StringSetSetting:
        return self._register(
            StringSetSetting(self._store, key, initial, self._logger, self._blob_format)
        )

    def clear_all(self) -> None:
        """Clear every setting this factory created. Subscribers are not notified."""
        for setting in self.settings.values():
            setting.clear()

    def reset_all(self) -> None:
        """Reset every setting this factory created to its initial value."""
        for setting in self.settings.values():
            setting.reset()
