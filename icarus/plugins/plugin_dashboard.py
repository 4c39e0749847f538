# icarus/plugins/plugin_dashboard.py
"""
Dashboard Plugin - Overview of all integrations
Shows a status card per integration, fed by the pollers through the event bus.
"""

import logging

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QGridLayout, QFrame
)
from PyQt6.QtCore import Qt

from icarus.core.api_client import ApiClient
from icarus.core.credential_store import CredentialStore, INTEGRATIONS
from icarus.core.event_bus import EventBus
from icarus.core.plugin_base import PluginBase
from icarus.core.settings_manager import AppPreferences

STATUS_STYLES = {
    "up": ("🟢 Online", "color: #4CAF50; font-weight: bold;"),
    "down": ("🔴 Offline", "color: #F44336; font-weight: bold;"),
    "unconfigured": ("⚫ Not Configured", "color: #888;"),
    "configured": ("⚪ Configured", ""),
}

ICONS = {
    "Tautulli": "📈",
    "Plex": "🎬",
    "Radarr": "🎞️",
    "Sonarr": "📺",
    "Overseerr": "📝",
    "SabNZB": "📥",
}


class DashboardPlugin(PluginBase):
    """
    Dashboard showing the status of every integration.
    """

    def __init__(self, logger: logging.Logger, preferences: AppPreferences, credentials: CredentialStore,
                 api_client: ApiClient, event_bus: EventBus):
        super().__init__(logger, preferences, credentials, api_client, event_bus)
        self.widget = None
        self.service_cards = {}
        self.event_bus.subscribe("service_status_changed", self._on_status_update)
        self.event_bus.subscribe("settings_changed", self._on_settings_changed)

    def get_name(self) -> str:
        return "Dashboard"

    def get_widget(self) -> QWidget:
        """Create the dashboard widget."""
        if self.widget is not None:
            return self.widget

        self.widget = QWidget()
        layout = QVBoxLayout(self.widget)

        title = QLabel("<h1>Media Dashboard</h1>")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        grid = QGridLayout()
        for index, name in enumerate(INTEGRATIONS):
            card = self._create_service_card(name, ICONS.get(name, ""))
            self.service_cards[name] = card
            grid.addWidget(card, index // 3, index % 3)

        layout.addLayout(grid)
        layout.addStretch()

        self._refresh_configured_state()
        return self.widget

    def _create_service_card(self, name: str, icon: str) -> QFrame:
        """Create a status card for an integration."""
        frame = QFrame()
        frame.setFrameStyle(QFrame.Shape.StyledPanel | QFrame.Shadow.Raised)
        frame.setLineWidth(2)

        layout = QVBoxLayout(frame)
        title = QLabel(f"<h3>{icon} {name}</h3>")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        status_label = QLabel()
        status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(status_label)

        frame.status_label = status_label
        return frame

    def _set_card_status(self, name: str, status: str):
        card = self.service_cards.get(name)
        if card is None:
            return
        text, style = STATUS_STYLES.get(status, ("⚪ Unknown", ""))
        card.status_label.setText(text)
        card.status_label.setStyleSheet(style)

    def _refresh_configured_state(self):
        """Mark cards from stored credentials, before any poll result arrives."""
        for name in self.service_cards:
            configured = self.credentials.load(name).is_configured
            self._set_card_status(name, "configured" if configured else "unconfigured")

    def _on_status_update(self, integration: str, status: str):
        """
        Slot that receives 'service_status_changed' events.
        """
        self._set_card_status(integration, status)
        self.logger.debug(f"Dashboard updated status for '{integration}' to '{status}'")

    def _on_settings_changed(self, integration: str):
        if self.service_cards:
            self._refresh_configured_state()

    def get_tab_name(self) -> str:
        return "Dashboard"

    def get_icon(self) -> str:
        return "📊"

    def get_sort_key(self) -> int:
        return 0
