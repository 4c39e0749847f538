"""Shared fixtures: an offscreen Qt application and helpers to spin its event loop."""
import os
import time

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QCoreApplication, QEventLoop  # noqa: E402
from PyQt6.QtWidgets import QApplication  # noqa: E402

from icarus.core.credential_store import CredentialStore  # noqa: E402
from icarus.core.settings_manager import MemorySettingsRepository  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


def spin_until(predicate, timeout: float = 2.0) -> bool:
    """Process Qt events until predicate() is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        QCoreApplication.processEvents(QEventLoop.ProcessEventsFlag.AllEvents, 20)
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def spin(seconds: float):
    """Process Qt events for a fixed amount of time."""
    spin_until(lambda: False, timeout=seconds)


@pytest.fixture
def settings():
    return MemorySettingsRepository()


@pytest.fixture
def credentials(settings):
    return CredentialStore(settings)
