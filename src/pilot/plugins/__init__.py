"""Extension layer — plugin catalog and discovery.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery.
INVARIANT: Plugin failures are warnings, never errors.
"""

from pilot.plugins.catalog import ErrorEvent, Plugin, PluginCatalog, PluginEvent, RegistryEvent
from pilot.plugins.hookspecs import hookimpl

__all__ = ["ErrorEvent", "Plugin", "PluginCatalog", "PluginEvent", "RegistryEvent", "hookimpl"]
