"""
Finds the dashboard's tab plugins and owns their lifetime.
"""

import importlib
import inspect
import logging
import pkgutil
from typing import List, Optional

from .plugin_base import PluginBase

logger = logging.getLogger(__name__)

PLUGIN_MODULE_PREFIX = "plugin_"


class PluginRegistry:
    """
    Loads every `plugin_*` module of a package and keeps one instance
    of each PluginBase subclass it defines.
    """

    def __init__(self, *plugin_args):
        """
        Args:
            *plugin_args: Forwarded to every plugin constructor
                          (logger, preferences, credentials, api_client, event_bus)
        """
        self.plugins: List[PluginBase] = []
        self.plugin_args = plugin_args

    def discover_plugins(self, package_name: str):
        """Import and instantiate the plugins found in `package_name` (e.g. 'icarus.plugins')."""
        package = importlib.import_module(package_name)
        module_names = sorted(
            info.name for info in pkgutil.iter_modules(package.__path__)
            if info.name.startswith(PLUGIN_MODULE_PREFIX)
        )
        logger.info(f"Plugin modules in {package_name}: {module_names}")

        for name in module_names:
            qualified = f"{package_name}.{name}"
            try:
                self._load_module(qualified)
            except Exception as e:
                # A broken plugin must not keep the rest of the dashboard from starting
                logger.error(f"Could not import plugin module {qualified}: {e}", exc_info=True)

        logger.info(f"{len(self.plugins)} plugin(s) ready")

    def _load_module(self, module_name: str):
        module = importlib.import_module(module_name)
        classes = [
            cls for _, cls in inspect.getmembers(module, inspect.isclass)
            if issubclass(cls, PluginBase) and not inspect.isabstract(cls) and cls.__module__ == module.__name__
        ]
        if not classes:
            logger.warning(f"{module_name} defines no plugin class")
            return

        for cls in classes:
            try:
                plugin = cls(*self.plugin_args)
            except Exception as e:
                logger.error(f"Could not create plugin {cls.__name__}: {e}", exc_info=True)
                continue
            self.plugins.append(plugin)
            logger.debug(f"Plugin loaded: {plugin.get_name()} from {module_name}")

    def get_all_plugins(self) -> List[PluginBase]:
        """Plugins in tab order (sort key, then tab name)."""
        return sorted(self.plugins, key=lambda p: (p.get_sort_key(), p.get_tab_name()))

    def get_plugin(self, name: str) -> Optional[PluginBase]:
        wanted = name.lower()
        return next((p for p in self.plugins if p.get_name().lower() == wanted), None)

    def cleanup_all(self):
        """Give every plugin a chance to stop timers and threads before exit."""
        for plugin in self.plugins:
            try:
                plugin.cleanup()
            except Exception as e:
                logger.error(f"Cleanup failed for {plugin.get_name()}: {e}")
        logger.info("Plugins cleaned up")
