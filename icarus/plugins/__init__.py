"""Integration plugins. Modules named plugin_* are discovered at startup."""
