"""Unit tests for settings, credentials, models and utilities."""

import logging
from unittest.mock import patch

import pytest
from keyring.errors import KeyringError
from PyQt6.QtCore import QSettings

from icarus.core.credential_store import CredentialStore
from icarus.core.logging_handler import QtLogHandler, setup_logging
from icarus.core.models import Credential, PollResult, PollSnapshot, PollState, Session
from icarus.core.secure_storage import SecureStorage
from icarus.core.settings_manager import (
    AppPreferences, AppearanceMode, MemorySettingsRepository, QtSettingsRepository
)
from icarus.core.utils import format_interval, parse_percent, validate_url


# ─── URL grammar ─────────────────────────────────────────────────────────────

class TestValidateUrl:
    @pytest.mark.parametrize("url", [
        "https://192.168.1.5:8181",
        "http://localhost/api",
        "http://localhost:8181",
        "https://tautulli.example.com",
        "https://media.home.lan.example.org:443/tautulli",
        "http://10.0.0.2",
    ])
    def test_accepts_supported_urls(self, url):
        assert validate_url(url) is True
        assert CredentialStore.validate_url(url) is True

    @pytest.mark.parametrize("url", [
        "example.com",
        "192.168.1.5:8181",
        "ftp://example.com",
        "https://",
        "http://nodots",
        "",
    ])
    def test_rejects_unsupported_urls(self, url):
        assert validate_url(url) is False


class TestFormatting:
    def test_format_interval_matches_menu_labels(self):
        assert format_interval(10) == "10 sec"
        assert format_interval(30) == "30 sec"
        assert format_interval(60) == "1 min"
        assert format_interval(120) == "2 min"
        assert format_interval(90) == "1 min 30 sec"
        assert format_interval(30.0) == "30 sec"

    def test_parse_percent(self):
        assert parse_percent(42) == 42.0
        assert parse_percent("57") == 57.0
        assert parse_percent(150) == 100.0
        assert parse_percent(-3) == 0.0
        assert parse_percent(None) is None
        assert parse_percent("n/a") is None
        assert parse_percent(True) is None


# ─── Settings ────────────────────────────────────────────────────────────────

class TestAppPreferences:
    def test_defaults(self, settings):
        prefs = AppPreferences(settings)
        assert prefs.refresh_interval == 30
        assert prefs.appearance_mode is AppearanceMode.SYSTEM

    def test_round_trip(self, settings):
        prefs = AppPreferences(settings)
        prefs.refresh_interval = 120
        prefs.appearance_mode = AppearanceMode.DARK
        assert settings.get("refreshInterval") == 120
        assert settings.get("appearanceMode") == "dark"
        assert prefs.refresh_interval == 120
        assert prefs.appearance_mode is AppearanceMode.DARK

    def test_rejects_unsupported_interval(self, settings):
        prefs = AppPreferences(settings)
        with pytest.raises(ValueError):
            prefs.refresh_interval = 45

    def test_invalid_stored_values_fall_back(self):
        prefs = AppPreferences(MemorySettingsRepository({
            "refreshInterval": "soon",
            "appearanceMode": "neon",
        }))
        assert prefs.refresh_interval == 30
        assert prefs.appearance_mode is AppearanceMode.SYSTEM

    def test_interval_stored_as_string_is_accepted(self):
        # QSettings ini files hand numbers back as strings
        prefs = AppPreferences(MemorySettingsRepository({"refreshInterval": "60"}))
        assert prefs.refresh_interval == 60


class TestQtSettingsRepository:
    def test_values_persist_to_ini_file(self, qapp, tmp_path):
        path = str(tmp_path / "icarus.ini")
        repo = QtSettingsRepository(QSettings(path, QSettings.Format.IniFormat))
        assert repo.has_any_settings() is False
        repo.set("apiURL_Tautulli", "http://localhost:8181")

        reopened = QtSettingsRepository(QSettings(path, QSettings.Format.IniFormat))
        assert reopened.get_str("apiURL_Tautulli") == "http://localhost:8181"
        assert reopened.get_str("apiKey_Tautulli") == ""
        assert reopened.has_any_settings() is True


# ─── Credential store ────────────────────────────────────────────────────────

class TestCredentialStore:
    def test_load_missing_returns_empty_strings(self, credentials):
        credential = credentials.load("Radarr")
        assert credential == Credential("", "")
        assert credential.is_configured is False

    def test_save_then_load(self, credentials, settings):
        credentials.save("Tautulli", " http://localhost:8181/ ", " abc123 ")
        assert settings.get("apiURL_Tautulli") == "http://localhost:8181"
        assert settings.get("apiKey_Tautulli") == "abc123"
        assert credentials.load("Tautulli") == Credential("http://localhost:8181", "abc123")

    def test_save_overwrites(self, credentials):
        credentials.save("Sonarr", "http://a.example.com", "one")
        credentials.save("Sonarr", "http://b.example.com", "two")
        assert credentials.load("Sonarr") == Credential("http://b.example.com", "two")

    def test_save_does_not_validate(self, credentials):
        credentials.save("Plex", "not a url", "key")
        assert credentials.load("Plex").endpoint_url == "not a url"

    def test_integrations_are_isolated(self, credentials):
        credentials.save("Tautulli", "http://localhost:8181", "t-key")
        assert credentials.load("Overseerr").is_configured is False

    def test_api_keys_go_to_secret_repository(self, settings):
        secrets = MemorySettingsRepository()
        store = CredentialStore(settings, secrets=secrets)
        store.save("Tautulli", "http://localhost:8181", "secret")
        assert settings.get("apiKey_Tautulli") is None
        assert secrets.get("apiKey_Tautulli") == "secret"
        assert store.load("Tautulli").api_key == "secret"


class TestSecureStorage:
    def test_get_and_set_use_keyring(self):
        with patch("icarus.core.secure_storage.keyring") as mock_keyring:
            mock_keyring.get_password.return_value = "s3cret"
            storage = SecureStorage()
            storage.set("apiKey_Tautulli", "s3cret")
            assert storage.get("apiKey_Tautulli") == "s3cret"
        mock_keyring.set_password.assert_called_once_with("Icarus", "apiKey_Tautulli", "s3cret")

    def test_missing_secret_returns_default(self):
        with patch("icarus.core.secure_storage.keyring") as mock_keyring:
            mock_keyring.get_password.return_value = None
            assert SecureStorage().get_str("apiKey_Radarr") == ""

    def test_vault_errors_do_not_propagate(self):
        with patch("icarus.core.secure_storage.keyring") as mock_keyring:
            mock_keyring.get_password.side_effect = KeyringError("locked")
            mock_keyring.set_password.side_effect = KeyringError("locked")
            storage = SecureStorage()
            storage.set("apiKey_Radarr", "x")
            assert storage.get("apiKey_Radarr", "") == ""


# ─── Models ──────────────────────────────────────────────────────────────────

class TestModels:
    def test_full_thumbnail_url(self):
        session = Session(id="1", title="Movie", user="alice", thumb="/library/metadata/1/thumb")
        assert session.full_thumbnail_url("http://localhost:8181") == \
            "http://localhost:8181/library/metadata/1/thumb"
        assert session.full_thumbnail_url("") is None
        assert Session(id="2", title="x", user="y").full_thumbnail_url("http://localhost") is None

    def test_session_id_is_stable(self):
        assert Session.make_id("Movie", "alice") == Session.make_id("Movie", "alice")
        assert Session.make_id("Movie", "alice") != Session.make_id("Movie", "bob")
        assert Session.make_id("Movie", "alice", "17") != Session.make_id("Movie", "alice", "18")

    def test_poll_result_states_are_exclusive(self):
        snapshot = PollSnapshot(sessions=())
        loading = PollResult.loading()
        error = PollResult.error("boom")
        ready = PollResult.ready(snapshot)

        assert (loading.is_loading, loading.is_error, loading.is_ready) == (True, False, False)
        assert (error.is_loading, error.is_error, error.is_ready) == (False, True, False)
        assert (ready.is_loading, ready.is_error, ready.is_ready) == (False, False, True)
        assert error.state is PollState.ERROR and error.message == "boom"
        assert ready.snapshot is snapshot


# ─── Logging ─────────────────────────────────────────────────────────────────

class TestLogging:
    def test_records_reach_the_log_tab_slot(self, qapp):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        lines = []
        try:
            setup_logging(lines.append, level=logging.DEBUG)
            assert any(isinstance(h, QtLogHandler) for h in root.handlers)
            logging.getLogger("icarus.test").warning("Tautulli unreachable")
            assert any("WARNING - icarus.test - Tautulli unreachable" in line for line in lines)
            assert logging.getLogger("urllib3").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
