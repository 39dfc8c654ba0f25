"""pilot — in-process extension host."""

from pilot.domain.environment import ChangeEvent, Environment
from pilot.domain.events import EventEmitter
from pilot.plugins.catalog import PluginCatalog

__version__ = "0.3.0"

__all__ = ["ChangeEvent", "Environment", "EventEmitter", "PluginCatalog", "__version__"]
