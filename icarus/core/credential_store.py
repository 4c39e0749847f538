# icarus/core/credential_store.py
"""
Per-integration endpoint URL and API key storage.
"""

import logging
from typing import Optional

from .models import Credential
from .settings_manager import SettingsRepository
from .utils import normalize_url, validate_url

logger = logging.getLogger(__name__)

# Integrations that can be configured, in display order
INTEGRATIONS = ("Tautulli", "Plex", "Radarr", "Sonarr", "Overseerr", "SabNZB")


def api_url_key(integration: str) -> str:
    return f"apiURL_{integration}"


def api_key_key(integration: str) -> str:
    return f"apiKey_{integration}"


class CredentialStore:
    """
    Reads and writes integration credentials.

    URLs live in the settings repository. API keys go to `secrets` when one
    is given (e.g. SecureStorage), otherwise to the settings repository too.
    """
    def __init__(self, settings: SettingsRepository, secrets: Optional[SettingsRepository] = None):
        self.settings = settings
        self.secrets = secrets if secrets is not None else settings

    def save(self, integration: str, endpoint_url: str, api_key: str):
        """Overwrite both fields for an integration. No validation is done here."""
        self.settings.set(api_url_key(integration), normalize_url(endpoint_url))
        self.secrets.set(api_key_key(integration), (api_key or "").strip())
        logger.info(f"{integration} API settings saved: {normalize_url(endpoint_url)}")

    def load(self, integration: str) -> Credential:
        """Stored values for an integration, or empty strings if absent."""
        return Credential(
            endpoint_url=self.settings.get_str(api_url_key(integration), ""),
            api_key=self.secrets.get_str(api_key_key(integration), ""),
        )

    @staticmethod
    def validate_url(candidate: str) -> bool:
        return validate_url(candidate)
