"""Tests for the settings dialog's connection test and save flow."""

import threading
from unittest.mock import MagicMock

import pytest
from PyQt6.QtWidgets import QDialogButtonBox

from icarus.core.settings_manager import AppPreferences
from icarus.ui.settings_dialog import SettingsDialog
from tests.conftest import spin_until


def status_response(status_code):
    response = MagicMock()
    response.status_code = status_code
    return response


@pytest.fixture
def dialog_factory(qapp, settings, credentials):
    credentials.save("Tautulli", "http://localhost:8181", "abc123")
    dialogs = []

    def make(api_client):
        dialog = SettingsDialog(api_client, AppPreferences(settings), credentials)
        dialogs.append(dialog)
        return dialog

    yield make
    for dialog in dialogs:
        dialog.deleteLater()


def ok_button(dialog):
    return dialog.buttons.button(QDialogButtonBox.StandardButton.Ok)


def test_connection_test_reports_success(dialog_factory):
    api_client = MagicMock()
    api_client.get.return_value = status_response(200)
    dialog = dialog_factory(api_client)

    dialog._test_service("Tautulli")
    assert spin_until(lambda: dialog.test_thread is None)

    assert "Success" in dialog.fields["Tautulli"].status.text()
    api_client.get.assert_called_once_with("http://localhost:8181/status", headers={"Authorization": "abc123"})
    assert ok_button(dialog).isEnabled()


def test_ok_is_blocked_while_a_test_runs_and_closing_waits_for_it(dialog_factory):
    gate = threading.Event()

    def slow_get(url, **kwargs):
        gate.wait(5)
        return status_response(401)

    api_client = MagicMock()
    api_client.get.side_effect = slow_get
    dialog = dialog_factory(api_client)

    dialog._test_service("Tautulli")
    assert not ok_button(dialog).isEnabled()

    releaser = threading.Timer(0.1, gate.set)
    releaser.start()
    try:
        dialog.reject()
        assert dialog.test_thread is None or dialog.test_thread.isFinished()
    finally:
        gate.set()
        releaser.join()
    assert spin_until(lambda: dialog.test_thread is None)


def test_save_records_only_changed_integrations(dialog_factory, credentials):
    dialog = dialog_factory(MagicMock())
    dialog.fields["Radarr"].url.setText("http://radarr.example.com/")
    dialog.fields["Radarr"].api_key.setText("r-key")

    dialog.save_settings()

    assert dialog.changed_integrations == ["Radarr"]
    assert credentials.load("Radarr").endpoint_url == "http://radarr.example.com"
    assert dialog.interval_changed is False
