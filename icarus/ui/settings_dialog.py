# icarus/ui/settings_dialog.py
"""
Settings dialog for integration URLs and API keys, the refresh interval
and the appearance mode.
"""
import logging
from typing import Dict, Optional

from PyQt6.QtWidgets import (
    QDialog, QLineEdit, QFormLayout, QDialogButtonBox, QLabel,
    QWidget, QPushButton, QHBoxLayout, QComboBox, QMessageBox
)
from PyQt6.QtCore import QThread, pyqtSlot

from icarus.core.api_client import ApiClient, ApiWorker
from icarus.core.credential_store import CredentialStore, INTEGRATIONS
from icarus.core.fetcher import Fetcher, fetcher_for
from icarus.core.models import Credential
from icarus.core.settings_manager import AppPreferences, AppearanceMode, REFRESH_INTERVAL_CHOICES
from icarus.core.utils import format_interval, normalize_url, validate_url

logger = logging.getLogger(__name__)

INVALID_URL_HINT = "Invalid URL format. Example: https://example.com"
TEST_THREAD_WAIT_MS = 15000


class IntegrationFields:
    """The input widgets for one integration."""

    def __init__(self, name: str, credential: Credential):
        self.name = name
        self.url = QLineEdit(credential.endpoint_url)
        self.url.setPlaceholderText("Enter Instance URL")
        self.api_key = QLineEdit(credential.api_key)
        self.api_key.setPlaceholderText("Enter Instance API Key")
        self.api_key.setEchoMode(QLineEdit.EchoMode.Password)
        self.url_hint = QLabel(INVALID_URL_HINT)
        self.url_hint.setStyleSheet("color: #F44336; font-size: 11px;")
        self.test_button = QPushButton("Test Connection")
        self.status = QLabel()

    def credential(self) -> Credential:
        return Credential(normalize_url(self.url.text()), self.api_key.text().strip())

    def is_valid(self) -> bool:
        return validate_url(normalize_url(self.url.text()))

    def is_blank(self) -> bool:
        return not self.url.text().strip() and not self.api_key.text().strip()


class SettingsDialog(QDialog):
    """
    Settings dialog for configuring every integration and the app preferences.
    """
    def __init__(self, api_client: ApiClient, preferences: AppPreferences, credentials: CredentialStore,
                 parent=None):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setModal(True)
        self.resize(520, 760)

        self.api_client = api_client
        self.preferences = preferences
        self.credentials = credentials

        self.fields: Dict[str, IntegrationFields] = {}
        self.test_thread: Optional[QThread] = None
        self.test_worker: Optional[ApiWorker] = None
        self.testing_name: Optional[str] = None
        self.changed_integrations = []
        self.interval_changed = False
        self.appearance_changed = False

        layout = QFormLayout(self)

        # --- Appearance ---
        layout.addRow(QLabel("<b>Appearance</b>"))
        self.appearance_combo = QComboBox()
        for mode in AppearanceMode:
            self.appearance_combo.addItem(mode.value.title(), mode)
        self.appearance_combo.setCurrentIndex(list(AppearanceMode).index(self.preferences.appearance_mode))
        layout.addRow("Theme:", self.appearance_combo)

        # --- Refresh ---
        layout.addRow(QLabel("<b>Other Settings</b>"))
        self.interval_combo = QComboBox()
        for seconds in REFRESH_INTERVAL_CHOICES:
            self.interval_combo.addItem(format_interval(seconds), seconds)
        self.interval_combo.setCurrentIndex(REFRESH_INTERVAL_CHOICES.index(self.preferences.refresh_interval))
        layout.addRow("Refresh Interval:", self.interval_combo)

        # --- Integrations ---
        for name in INTEGRATIONS:
            self._add_integration_rows(layout, name)

        # --- Buttons ---
        self.buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self.buttons.accepted.connect(self.save_settings)
        self.buttons.rejected.connect(self.reject)
        layout.addRow(self.buttons)

        self._update_validation()

    def _add_integration_rows(self, layout: QFormLayout, name: str):
        fields = IntegrationFields(name, self.credentials.load(name))
        self.fields[name] = fields

        layout.addRow(QLabel(f"<b>{name}</b>"))
        layout.addRow(f"{name} API URL:", fields.url)
        layout.addRow("", fields.url_hint)
        layout.addRow(f"{name} API Key:", fields.api_key)

        row = QWidget()
        row_layout = QHBoxLayout(row)
        row_layout.setContentsMargins(0, 0, 0, 0)
        row_layout.addWidget(fields.status)
        row_layout.addStretch()
        row_layout.addWidget(fields.test_button)
        layout.addRow(row)

        fields.url.textChanged.connect(self._update_validation)
        fields.api_key.textChanged.connect(self._update_validation)
        fields.test_button.clicked.connect(lambda: self._test_service(name))

    def _update_validation(self):
        """Show URL hints and only allow saving/testing valid input."""
        all_ok = True
        for fields in self.fields.values():
            url_ok = fields.is_blank() or fields.is_valid()
            fields.url_hint.setVisible(not url_ok)
            fields.test_button.setEnabled(
                self.test_thread is None and fields.is_valid() and bool(fields.api_key.text().strip())
            )
            all_ok = all_ok and url_ok
        self.buttons.button(QDialogButtonBox.StandardButton.Ok).setEnabled(all_ok and self.test_thread is None)

    def _test_service(self, name: str):
        """Runs the connection test in a worker thread."""
        if self.test_thread is not None:
            QMessageBox.warning(self, "Test in Progress", "Another test is already running. Please wait.")
            return

        fields = self.fields[name]
        fetcher = fetcher_for(name, self.api_client) or Fetcher(self.api_client)
        fields.test_button.setText("Testing...")
        fields.status.setText("")
        self.testing_name = name

        self.test_thread = QThread()
        self.test_worker = ApiWorker(fetcher.test_connection, fields.credential())
        self.test_worker.moveToThread(self.test_thread)
        self._update_validation()

        self.test_worker.finished.connect(self._on_test_finished)
        self.test_worker.finished.connect(self.test_thread.quit)
        self.test_worker.finished.connect(self.test_worker.deleteLater)
        self.test_thread.finished.connect(self.test_thread.deleteLater)
        self.test_thread.finished.connect(self._clear_test_thread)

        self.test_thread.started.connect(self.test_worker.run)
        self.test_thread.start()

    @pyqtSlot(object, str)
    def _on_test_finished(self, reachable: Optional[bool], error: str):
        """Handles the result of the connection test."""
        fields = self.fields[self.testing_name]
        fields.test_button.setText("Test Connection")

        logger.info(f"Connection test for {self.testing_name}: {'ok' if reachable else error or 'unreachable'}")
        if reachable and not error:
            fields.status.setText("✅ Success: API is reachable")
            fields.status.setStyleSheet("color: #4CAF50;")
        else:
            fields.status.setText(f"❌ Failed: {error}" if error else "❌ Failed: Invalid response")
            fields.status.setStyleSheet("color: #F44336;")

    def _clear_test_thread(self):
        """Clear thread references."""
        self.test_thread = None
        self.test_worker = None
        self.testing_name = None
        self._update_validation()

    def done(self, result: int):
        """Closing waits for a running connection test so its thread never outlives the dialog."""
        if self.test_thread is not None:
            logger.debug("Waiting for connection test before closing settings")
            self.test_thread.quit()
            self.test_thread.wait(TEST_THREAD_WAIT_MS)
        super().done(result)

    def save_settings(self):
        """
        Save preferences and every changed integration credential.
        """
        mode = self.appearance_combo.currentData()
        if mode != self.preferences.appearance_mode:
            self.preferences.appearance_mode = mode
            self.appearance_changed = True

        seconds = self.interval_combo.currentData()
        if seconds != self.preferences.refresh_interval:
            self.preferences.refresh_interval = seconds
            self.interval_changed = True

        for name, fields in self.fields.items():
            credential = fields.credential()
            if credential != self.credentials.load(name):
                self.credentials.save(name, credential.endpoint_url, credential.api_key)
                self.changed_integrations.append(name)

        self.accept()
