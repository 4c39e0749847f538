#!/usr/bin/env python3
# icarus/main.py
"""
Icarus - dashboard for self-hosted media-server tooling.
Main application entry point that auto-discovers and loads plugins.
This is free and unencumbered software released into the public domain.
"""

import sys
from typing import Dict

from PyQt6.QtWidgets import QApplication, QMainWindow, QTabWidget, QTextEdit
from PyQt6.QtCore import Qt, QTimer, QByteArray
from PyQt6.QtGui import QKeySequence, QAction

from icarus.core import (
    setup_logging,
    QtSettingsRepository,
    AppPreferences,
    SecureStorage,
    CredentialStore,
    ApiClient,
    EventBus,
)
from icarus.core.plugin_base import PluginBase
from icarus.core.plugin_registry import PluginRegistry
from icarus.core.settings_manager import APP_NAME, APP_ORGANIZATION
from icarus.core.themes import apply_theme
from icarus.ui import SettingsDialog

PLUGIN_PACKAGE = "icarus.plugins"


class MainWindow(QMainWindow):
    """
    The main application window, dynamically populated with plugins.
    """
    def __init__(self):
        super().__init__()
        self.setWindowTitle(APP_NAME)

        # 1. Initialize Core Services
        self.log_widget = QTextEdit()
        self.log_widget.setReadOnly(True)

        self.logger = setup_logging(self.log_widget.append)
        self.settings = QtSettingsRepository()
        self.preferences = AppPreferences(self.settings)
        self.credentials = CredentialStore(self.settings, secrets=SecureStorage())
        self.api_client = ApiClient()
        self.event_bus = EventBus()

        geom = self.settings.get("main_window_geometry", b'')
        if isinstance(geom, QByteArray):
            self.restoreGeometry(geom)
        elif isinstance(geom, bytes) and geom:
            self.restoreGeometry(QByteArray(geom))
        else:
            self.setGeometry(100, 100, 900, 650)

        self.logger.info(f"Starting {APP_NAME}...")

        # 2. Setup Core UI
        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)
        self._create_menus()

        # 3. Load Plugins
        self.registry = PluginRegistry(
            self.logger,
            self.preferences,
            self.credentials,
            self.api_client,
            self.event_bus
        )
        self.registry.discover_plugins(PLUGIN_PACKAGE)

        # 4. Populate UI from Plugins
        self.tab_plugins: Dict[int, PluginBase] = {}
        self._active_plugin = None
        self._suspended = False
        self._load_plugin_tabs()
        self.tabs.addTab(self.log_widget, "📋 Log")
        self._setup_keyboard_shortcuts()

        # 5. Theme and lifecycle
        apply_theme(QApplication.instance(), self.preferences.appearance_mode)
        self.tabs.currentChanged.connect(self._on_tab_changed)
        QApplication.instance().applicationStateChanged.connect(self._on_application_state_changed)

        # 6. Initial display
        QTimer.singleShot(0, lambda: self._on_tab_changed(self.tabs.currentIndex()))
        self._check_first_run()

    def _create_menus(self):
        """Create application menu bar."""
        menu_bar = self.menuBar()
        file_menu = menu_bar.addMenu("&File")

        settings_action = QAction("&Settings...", self)
        settings_action.setShortcut(QKeySequence("Ctrl+,"))
        settings_action.triggered.connect(self.open_settings)
        file_menu.addAction(settings_action)

        file_menu.addSeparator()

        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence("Ctrl+Q"))
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def _load_plugin_tabs(self):
        """
        Get all loaded plugins and add their widgets as tabs.
        """
        plugins = self.registry.get_all_plugins()
        if not plugins:
            self.logger.warning("No plugins loaded. Application will have limited functionality.")
            return

        for plugin in plugins:
            try:
                widget = plugin.get_widget()
            except Exception as e:
                self.logger.error(f"Failed to load widget for {plugin.get_name()}: {e}", exc_info=True)
                continue
            icon_str = plugin.get_icon()
            tab_name = f"{icon_str} {plugin.get_tab_name()}" if icon_str else plugin.get_tab_name()
            index = self.tabs.addTab(widget, tab_name)
            self.tab_plugins[index] = plugin
            self.logger.info(f"Added tab for plugin: {plugin.get_name()}")

    def _setup_keyboard_shortcuts(self):
        """Ctrl+1..9 switch tabs."""
        for i in range(min(self.tabs.count(), 9)):
            shortcut = QAction(self)
            shortcut.setShortcut(QKeySequence(f"Ctrl+{i + 1}"))
            shortcut.triggered.connect(lambda checked=False, index=i: self.tabs.setCurrentIndex(index))
            self.addAction(shortcut)

    def _on_tab_changed(self, index: int):
        """
        Deactivate the plugin whose tab was left and activate the new one.
        """
        plugin = self.tab_plugins.get(index)
        if self._active_plugin is not None and self._active_plugin is not plugin:
            self._active_plugin.on_deactivate()
        self._active_plugin = plugin
        if plugin is not None:
            plugin.on_activate()

    def _on_application_state_changed(self, state: Qt.ApplicationState):
        """Resume polling when the app comes back to the foreground."""
        if state == Qt.ApplicationState.ApplicationActive:
            if self._suspended and self._active_plugin is not None:
                self.logger.debug(f"App resumed, reactivating {self._active_plugin.get_name()}")
                self._active_plugin.on_activate()
            self._suspended = False
        elif state in (Qt.ApplicationState.ApplicationSuspended, Qt.ApplicationState.ApplicationHidden):
            self._suspended = True
            if self._active_plugin is not None:
                self._active_plugin.on_deactivate()

    def open_settings(self):
        """
        Open the settings dialog and broadcast whatever changed.
        """
        dialog = SettingsDialog(self.api_client, self.preferences, self.credentials, self)
        accepted = dialog.exec()
        dialog.deleteLater()
        if not accepted:
            self.logger.info("Settings dialog cancelled")
            return

        self.logger.info("Settings saved successfully")
        if dialog.appearance_changed:
            apply_theme(QApplication.instance(), self.preferences.appearance_mode)
        if dialog.interval_changed:
            self.event_bus.publish("refresh_interval_changed", self.preferences.refresh_interval)
        for name in dialog.changed_integrations:
            self.event_bus.publish("settings_changed", name)

    def _check_first_run(self):
        """Open settings on first run."""
        if not self.settings.has_any_settings():
            self.logger.warning("No settings found. Opening settings dialog for first run...")
            QTimer.singleShot(100, self.open_settings)

    def closeEvent(self, event):
        """
        Handle application close event.
        """
        self.logger.info("Application shutting down...")

        self.settings.set("main_window_geometry", self.saveGeometry())

        self.registry.cleanup_all()
        self.api_client.close()
        event.accept()


def main():
    """
    Application entry point.
    """
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_ORGANIZATION)

    window = MainWindow()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
