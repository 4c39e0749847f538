# icarus/core/settings_manager.py
"""
Flat key-value settings persistence.
SettingsRepository is injected wherever settings are read, so the
QSettings-backed store can be swapped for the in-memory one.
"""

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

from PyQt6.QtCore import QSettings

logger = logging.getLogger(__name__)

# Application constants
APP_NAME = "Icarus"
APP_ORGANIZATION = "icarus"

REFRESH_INTERVAL_KEY = "refreshInterval"
APPEARANCE_MODE_KEY = "appearanceMode"
REFRESH_INTERVAL_CHOICES = (10, 30, 60, 120)
DEFAULT_REFRESH_INTERVAL = 30


class AppearanceMode(Enum):
    """Theme preference shared across the whole app."""
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


class SettingsRepository(ABC):
    """
    Interface for the process-wide key-value store.
    Writes are full-value overwrites; reads never fail.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any):
        pass

    def get_str(self, key: str, default: str = "") -> str:
        value = self.get(key, default)
        if value is None:
            return default
        return str(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default


class QtSettingsRepository(SettingsRepository):
    """
    Settings stored through QSettings (registry, plist or ini file).
    """
    def __init__(self, qsettings: Optional[QSettings] = None):
        self.qsettings = qsettings if qsettings is not None else QSettings(APP_ORGANIZATION, APP_NAME)

    def get(self, key: str, default: Any = None) -> Any:
        value = self.qsettings.value(key, default)

        # Handle case where QSettings returns string for bool
        if isinstance(default, bool) and isinstance(value, str):
            return value.lower() == 'true'

        return value

    def set(self, key: str, value: Any):
        self.qsettings.setValue(key, value)
        self.qsettings.sync()

    def has_any_settings(self) -> bool:
        """
        Check if any settings have been saved (for first-run detection).
        """
        return bool(self.qsettings.allKeys())


class MemorySettingsRepository(SettingsRepository):
    """Dictionary-backed store for headless runs and tests."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: Any):
        with self._lock:
            self._values[key] = value

    def has_any_settings(self) -> bool:
        with self._lock:
            return bool(self._values)


class AppPreferences:
    """
    App-wide preferences: refresh interval and appearance mode.
    Unknown stored values fall back to the defaults.
    """
    def __init__(self, repository: SettingsRepository):
        self.repository = repository

    @property
    def refresh_interval(self) -> int:
        value = self.repository.get_int(REFRESH_INTERVAL_KEY, DEFAULT_REFRESH_INTERVAL)
        if value not in REFRESH_INTERVAL_CHOICES:
            logger.warning(f"Ignoring unsupported refresh interval {value!r}, using {DEFAULT_REFRESH_INTERVAL}")
            return DEFAULT_REFRESH_INTERVAL
        return value

    @refresh_interval.setter
    def refresh_interval(self, seconds: int):
        if seconds not in REFRESH_INTERVAL_CHOICES:
            raise ValueError(
                f"Refresh interval must be one of {REFRESH_INTERVAL_CHOICES}, got {seconds!r}"
            )
        self.repository.set(REFRESH_INTERVAL_KEY, seconds)

    @property
    def appearance_mode(self) -> AppearanceMode:
        value = self.repository.get_str(APPEARANCE_MODE_KEY, AppearanceMode.SYSTEM.value)
        try:
            return AppearanceMode(value)
        except ValueError:
            logger.warning(f"Ignoring unknown appearance mode {value!r}")
            return AppearanceMode.SYSTEM

    @appearance_mode.setter
    def appearance_mode(self, mode: AppearanceMode):
        self.repository.set(APPEARANCE_MODE_KEY, AppearanceMode(mode).value)
