"""Ports - interfaces the settings layer depends on."""

from .clock import ClockPort
from .logger import LoggerPort
from .settings_store import SettingsStorePort

__all__ = ["ClockPort", "LoggerPort", "SettingsStorePort"]
