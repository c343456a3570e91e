"""typed-prefs - Typed settings persisted in a key-value store."""

from .application.broadcast import CurrentValueBroadcast, Subscription
from .application.factory import SettingsFactory
from .application.setting import (
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
from .domain.enums import BlobFormat, ValueKind
from .infrastructure.config import TypedPrefsConfig
from .infrastructure.file_store import FileSettingsStore
from .infrastructure.in_memory_store import InMemorySettingsStore

__all__ = [
    "BlobFormat",
    "BoolSetting",
    "CodableSetting",
    "CurrentValueBroadcast",
    "DateSetting",
    "DoubleSetting",
    "FileSettingsStore",
    "FloatSetting",
    "InMemorySettingsStore",
    "IntSetSetting",
    "IntSetting",
    "RawIntSetting",
    "RawStringSetting",
    "SettingsFactory",
    "StringSetSetting",
    "StringSetting",
    "Subscription",
    "TypedPrefsConfig",
    "TypedSetting",
    "ValueKind",
]
__version__ = "0.1.0"
