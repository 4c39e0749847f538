"""
Icarus Core Framework
Settings, credentials and the polling status client.
Widget-level modules (plugin_base, plugin_registry, themes) are imported
directly so headless users of the core never load QtWidgets.
"""

__version__ = "1.0.0"

from .logging_handler import setup_logging, QtLogHandler
from .settings_manager import (
    SettingsRepository, QtSettingsRepository, MemorySettingsRepository,
    AppPreferences, AppearanceMode
)
from .secure_storage import SecureStorage
from .credential_store import CredentialStore
from .api_client import ApiClient, ApiWorker
from .errors import FetchError, NotConfigured, InvalidURL, TransportError, ServerError, DecodeError
from .models import Credential, Session, PollSnapshot, PollState, PollResult
from .fetcher import Fetcher, TautulliFetcher, fetcher_for
from .poll_scheduler import PollScheduler, SchedulerState
from .event_bus import EventBus

__all__ = [
    'setup_logging',
    'QtLogHandler',
    'SettingsRepository',
    'QtSettingsRepository',
    'MemorySettingsRepository',
    'AppPreferences',
    'AppearanceMode',
    'SecureStorage',
    'CredentialStore',
    'ApiClient',
    'ApiWorker',
    'FetchError',
    'NotConfigured',
    'InvalidURL',
    'TransportError',
    'ServerError',
    'DecodeError',
    'Credential',
    'Session',
    'PollSnapshot',
    'PollState',
    'PollResult',
    'Fetcher',
    'TautulliFetcher',
    'fetcher_for',
    'PollScheduler',
    'SchedulerState',
    'EventBus',
]
