"""Plugin discovery.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery of single-file plugins. Discovered objects
are handed to a :class:`PluginCatalog`; discovery never signals them.

Errors are logged as warnings but never raised: a broken plugin must not
prevent the rest of the host from starting.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pluggy

from pilot.plugins.hookspecs import PROJECT_NAME, PilotHookSpec

DEFAULT_ENTRY_POINT_GROUP = "pilot.plugins"

logger = logging.getLogger(__name__)


def discover_plugins(
    *,
    group: str | None = DEFAULT_ENTRY_POINT_GROUP,
    local_dir: Path | None = None,
    disabled: Iterable[str] = (),
) -> list[Any]:
    """Discover plugin instances from entry points and *local_dir*.

    Every returned object carries a ``name``; objects that lack one are
    given their pluggy registration name. Names listed in *disabled* are
    dropped.
    """
    pm = pluggy.PluginManager(PROJECT_NAME)
    pm.add_hookspecs(PilotHookSpec)
    if group:
        pm.load_setuptools_entrypoints(group)
        _normalize_plugin_instances(pm)
    if local_dir is not None:
        _discover_local(pm, local_dir)

    skip = set(disabled)
    found: list[Any] = []
    for registered_name, plugin in pm.list_name_plugin():
        if plugin is None:
            continue  # blocked
        name = getattr(plugin, "name", None) or registered_name
        if name in skip:
            logger.debug("Skipping disabled plugin: %s", name)
            continue
        if getattr(plugin, "name", None) is None:
            try:
                plugin.name = name
            except AttributeError:
                logger.warning("Plugin %r has no name and cannot be given one", plugin)
                continue
        found.append(plugin)
    logger.debug("Discovered %d plugin(s)", len(found))
    return found


def _discover_local(pm: pluggy.PluginManager, local_dir: Path) -> None:
    """Scan *local_dir* for single-file Python plugins.

    Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
    module. Classes defined in it that carry ``@hookimpl`` methods are
    instantiated; an instance without a ``name`` is named after the file.
    """
    if not local_dir.is_dir():
        return

    for py_file in sorted(local_dir.glob("*.py")):
        if py_file.name.startswith("_"):
            continue
        module_name = f"pilot_local_plugin_{py_file.stem}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, py_file)
            if spec is None or spec.loader is None:
                logger.warning("Could not create module spec for %s", py_file)
                continue
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
        except Exception:
            logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
            sys.modules.pop(module_name, None)
            continue

        for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module_name:
                continue  # imported
            if not _has_hook_impls(obj):
                continue
            try:
                instance = obj()
                if getattr(instance, "name", None) is None:
                    instance.name = py_file.stem
                pm.register(instance, name=module_name)
            except Exception:
                logger.warning(
                    "Failed to register plugin class %s from %s",
                    obj.__name__,
                    py_file,
                    exc_info=True,
                )
                continue
            logger.debug("Loaded local plugin %s from %s", obj.__name__, py_file)


def _normalize_plugin_instances(pm: pluggy.PluginManager) -> None:
    """Replace registered plugin classes with instantiated objects.

    Entry points may point at a class; handlers on a class object would be
    called unbound.
    """
    for plugin in list(pm.get_plugins()):
        if not inspect.isclass(plugin) or not _has_hook_impls(plugin):
            continue

        plugin_name = pm.get_name(plugin) or plugin.__name__
        pm.unregister(plugin)
        try:
            instance = plugin()
        except Exception:
            logger.warning(
                "Failed to instantiate entry-point plugin %s",
                plugin_name,
                exc_info=True,
            )
            continue
        pm.register(instance, name=plugin_name)
        logger.debug("Instantiated entry-point plugin: %s", plugin_name)


def _has_hook_impls(cls: type) -> bool:
    """Check whether *cls* has any method decorated with ``@hookimpl``.

    ``HookimplMarker("pilot")`` sets a ``pilot_impl`` attribute on
    decorated methods.
    """
    marker = f"{PROJECT_NAME}_impl"
    for name in dir(cls):
        if name.startswith("_"):
            continue
        method = getattr(cls, name, None)
        if callable(method) and getattr(method, marker, None):
            return True
    return False
