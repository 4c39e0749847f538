"""Tests for plugin discovery and the Tautulli plugin's polling lifecycle."""

import logging
from unittest.mock import MagicMock

import pytest

from icarus.core.event_bus import EventBus
from icarus.core.plugin_registry import PluginRegistry
from icarus.core.poll_scheduler import SchedulerState
from icarus.core.settings_manager import AppPreferences
from tests.conftest import spin_until


@pytest.fixture
def registry(qapp, settings, credentials):
    registry = PluginRegistry(
        logging.getLogger("test"),
        AppPreferences(settings),
        credentials,
        MagicMock(),
        EventBus(),
    )
    registry.discover_plugins("icarus.plugins")
    yield registry
    registry.cleanup_all()


def test_discovers_plugins_in_display_order(registry):
    names = [plugin.get_name() for plugin in registry.get_all_plugins()]
    assert names == ["Dashboard", "Tautulli"]
    assert registry.get_plugin("tautulli") is not None
    assert registry.get_plugin("Plex") is None


def test_activate_polls_and_reports_missing_configuration(registry):
    plugin = registry.get_plugin("Tautulli")

    plugin.on_activate()

    assert plugin.scheduler.is_polling
    assert spin_until(lambda: plugin.scheduler.current_result.is_error)
    assert plugin.scheduler.current_result.message.startswith("Tautulli API is not configured.")
    plugin.api_client.get.assert_not_called()


def test_deactivate_and_cleanup_stop_polling(registry):
    plugin = registry.get_plugin("Tautulli")

    plugin.on_activate()
    plugin.on_deactivate()
    assert plugin.scheduler.state is SchedulerState.STOPPED
    assert plugin.scheduler.has_active_timer is False

    plugin.on_activate()
    plugin.cleanup()
    assert plugin.scheduler.state is SchedulerState.STOPPED


def test_interval_change_restarts_only_a_running_poller(registry):
    plugin = registry.get_plugin("Tautulli")

    plugin.event_bus.publish("refresh_interval_changed", 60)
    assert plugin.scheduler.state is SchedulerState.IDLE

    plugin.on_activate()
    plugin.event_bus.publish("refresh_interval_changed", 120)
    assert plugin.scheduler.interval == 120
