"""Plugin catalog — registration and fault-isolated action broadcast.

A plugin is any object with a unique string ``name``. It may implement a
handler for any action (``plug``, ``unplug``, or a custom name); a missing
handler is not an error.

INVARIANT: Plugin failures are warnings, never errors. One plugin's failure
never stops the rest of a broadcast.
INVARIANT: ``signal`` iterates a snapshot of its input, so registry changes
made by handlers do not affect the in-flight broadcast.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from pilot.domain.events import EventEmitter

logger = logging.getLogger(__name__)


@runtime_checkable
class Plugin(Protocol):
    """Structural type of a plugin. Action handlers are optional."""

    name: str


@dataclass
class RegistryEvent:
    """Payload of ``register`` / ``unregister``.

    ``plugin`` is None when ``unregister`` was given a name that was never
    registered.
    """

    plugin: Any


@dataclass
class PluginEvent:
    """Payload of an action event: the plugin and the broadcast params."""

    plugin: Any
    data: tuple[Any, ...]


@dataclass
class ErrorEvent:
    """Payload of ``error``: the action, the failing plugin, the exception."""

    action: str
    plugin: Any
    error: BaseException


def plugin_handler(plugin: Any, action: str) -> Callable[..., Any] | None:
    """Capability query: the handler *plugin* offers for *action*, if any.

    An ``actions`` mapping on the plugin wins over an attribute of the same
    name. The result is not checked for callability; calling a non-callable
    handler fails inside the broadcast's isolation boundary.
    """
    actions = getattr(plugin, "actions", None)
    if isinstance(actions, Mapping) and action in actions:
        return actions[action]
    return getattr(plugin, action, None)


class PluginCatalog(EventEmitter):
    """Mutable registry of named plugins that broadcasts actions to them.

    Events: ``register``, ``unregister``, ``error`` and one event per
    broadcast action name (``plug``, ``unplug``, custom).
    """

    def __init__(self, plugins: Iterable[Plugin] | None = None) -> None:
        super().__init__()
        self._plugins: dict[str, Any] = {}
        self._registry: list[Any] = []
        if plugins:
            self.register(plugins)

    @property
    def plugins(self) -> Mapping[str, Any]:
        """Read-only view of name -> plugin."""
        return MappingProxyType(self._plugins)

    @property
    def registry(self) -> tuple[Any, ...]:
        """Registered plugins in broadcast order."""
        return tuple(self._registry)

    def __len__(self) -> int:
        return len(self._registry)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[Any]:
        return iter(tuple(self._registry))

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def register(self, plugins: Iterable[Plugin]) -> PluginCatalog:
        """Register each plugin whose name is not yet known. First one wins."""
        for plugin in tuple(plugins):
            name = plugin.name
            if name in self._plugins:
                logger.debug("Plugin already registered, skipping: %s", name)
                continue
            self._plugins[name] = plugin
            self._registry.append(plugin)
            logger.debug("Registered plugin: %s", name, extra={"plugin": name})
            self.emit("register", RegistryEvent(plugin=plugin))
        return self

    def unregister(self, plugins: Iterable[Plugin | str]) -> PluginCatalog:
        """Remove each entry, given either as a plugin object or a name."""
        for entry in tuple(plugins):
            if isinstance(entry, str):
                self._remove(entry)
            else:
                self._remove(entry.name)
        return self

    def unregister_by_name(self, name: str) -> PluginCatalog:
        self._remove(name)
        return self

    def unregister_by_plugin(self, plugin: Plugin) -> PluginCatalog:
        self._remove(plugin.name)
        return self

    def _remove(self, name: str) -> None:
        plugin = self._plugins.pop(name, None)
        if plugin is not None:
            # Identity, not equality: plugins may compare equal by shape.
            for index, registered in enumerate(self._registry):
                if registered is plugin:
                    del self._registry[index]
                    break
            logger.debug("Unregistered plugin: %s", name, extra={"plugin": name})
        else:
            logger.debug("Unregister requested for unknown plugin: %s", name)
        self.emit("unregister", RegistryEvent(plugin=plugin))

    # ------------------------------------------------------------------
    # Broadcast
    # ------------------------------------------------------------------

    def signal(self, plugins: Iterable[Any], action: str, *params: Any) -> PluginCatalog:
        """Invoke *action* on each plugin in *plugins* with fault isolation.

        For every plugin the handler (if any) is called with *params*, then
        *action* is emitted on the catalog. A failure in either step emits
        ``error`` for that plugin and the broadcast moves on.
        """
        for plugin in tuple(plugins):
            try:
                handler = plugin_handler(plugin, action)
                if handler is not None:
                    handler(*params)
                self.emit(action, PluginEvent(plugin=plugin, data=params))
            except Exception as exc:
                name = getattr(plugin, "name", repr(plugin))
                logger.warning(
                    "Plugin %s failed on %r",
                    name,
                    action,
                    exc_info=True,
                    extra={"plugin": name, "action": action},
                )
                self.emit("error", ErrorEvent(action=action, plugin=plugin, error=exc))
        return self

    def plug(self, data: Any, plugins: Iterable[Any] | None = None) -> PluginCatalog:
        """Register *plugins* (if given) and signal ``plug`` with *data*.

        Without *plugins*, every registered plugin is signalled.
        """
        if plugins is not None:
            plugins = tuple(plugins)
            self.register(plugins)
        else:
            plugins = self._registry
        return self.signal(plugins, "plug", data)

    def unplug(self, data: Any, plugins: Iterable[Any] | None = None) -> PluginCatalog:
        """Signal ``unplug`` with *data*. Membership is left unchanged."""
        if plugins is None:
            plugins = self._registry
        return self.signal(plugins, "unplug", data)
