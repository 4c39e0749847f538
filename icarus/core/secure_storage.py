# icarus/core/secure_storage.py
"""
Secure credential management using the keyring library.
Exposes the OS vault through the SettingsRepository interface so API keys
can be kept out of the plain settings file.
"""

import logging
from typing import Any

import keyring
from keyring.errors import KeyringError

from .settings_manager import SettingsRepository

logger = logging.getLogger(__name__)

# Use a single, consistent service name for the application
KEYRING_SERVICE_NAME = "Icarus"


class SecureStorage(SettingsRepository):
    """A wrapper for the keyring library."""

    def __init__(self, service_name: str = KEYRING_SERVICE_NAME):
        self.service_name = service_name

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieves a credential from the OS secure vault.

        Args:
            key: The unique identifier (e.g., "apiKey_Tautulli")
        Returns:
            The stored secret, or default if not found or the vault is unavailable.
        """
        try:
            password = keyring.get_password(self.service_name, key)
        except KeyringError as e:
            logger.error(f"Failed to retrieve credential for {key}: {e}", exc_info=True)
            return default
        if password is None:
            return default
        logger.debug(f"Retrieved credential for: {key}")
        return password

    def set(self, key: str, value: Any):
        """
        Saves a credential to the OS secure vault.

        Args:
            key: The unique identifier (e.g., "apiKey_Tautulli")
            value: The secret to store.
        """
        try:
            keyring.set_password(self.service_name, key, "" if value is None else str(value))
            logger.info(f"Securely stored credential for: {key}")
        except KeyringError as e:
            logger.error(f"Failed to store credential for {key}: {e}", exc_info=True)
