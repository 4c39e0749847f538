"""
Abstract base class for all integration plugins.
Defines the plugin interface and lifecycle.
"""

import logging
from abc import ABC, abstractmethod
from PyQt6.QtWidgets import QWidget

from .api_client import ApiClient
from .credential_store import CredentialStore
from .event_bus import EventBus
from .settings_manager import AppPreferences


class PluginBase(ABC):
    """
    Abstract base class that all plugins must inherit from.
    One plugin per integration tab.
    """

    def __init__(self, logger: logging.Logger, preferences: AppPreferences, credentials: CredentialStore,
                 api_client: ApiClient, event_bus: EventBus):
        """
        Initialize plugin with core services.

        Args:
            logger: Application logger
            preferences: AppPreferences (refresh interval, appearance)
            credentials: CredentialStore for integration URLs and API keys
            api_client: ApiClient instance
            event_bus: EventBus instance for inter-plugin communication
        """
        self.logger = logger
        self.preferences = preferences
        self.credentials = credentials
        self.api_client = api_client
        self.event_bus = event_bus

    # --- Required Methods ---

    @abstractmethod
    def get_name(self) -> str:
        """
        Return the integration name, which is also the credential key
        (e.g. "Tautulli").
        """
        pass

    @abstractmethod
    def get_widget(self) -> QWidget:
        """
        Return the main QWidget for this plugin's tab.
        """
        pass

    # --- Optional Methods ---

    def get_tab_name(self) -> str:
        return self.get_name()

    def get_icon(self) -> str:
        """
        Return an emoji or icon identifier for the tab.
        """
        return ""

    def get_sort_key(self) -> int:
        """Lower values are shown first."""
        return 100

    # --- Lifecycle Hooks ---

    def on_activate(self):
        """
        Called when the plugin's tab is shown or the app returns to the foreground.
        Use this to refresh data or start polling.
        """
        pass

    def on_deactivate(self):
        """
        Called when the plugin's tab is hidden or the app is suspended.
        """
        pass

    def cleanup(self):
        """
        Called just before the plugin is unloaded.
        Use this to stop timers and wait for threads.
        """
        pass
