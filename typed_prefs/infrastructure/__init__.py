"""Infrastructure adapters for stores, logging, time and serialization."""

from .file_store import FileSettingsStore
from .in_memory_store import InMemorySettingsStore
from .simple_logger import SimpleLogger
from .system_clock import SystemClock

__all__ = ["FileSettingsStore", "InMemorySettingsStore", "SimpleLogger", "SystemClock"]
