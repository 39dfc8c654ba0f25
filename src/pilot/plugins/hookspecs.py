"""Pluggy hook specifications for the built-in lifecycle actions.

Discovered plugin classes mark their handlers with ``@hookimpl`` so local
directory scanning can tell plugins apart from helper classes. Dispatch
itself goes through :meth:`PluginCatalog.signal`, not the hook relay.
"""

from __future__ import annotations

from typing import Any

import pluggy

PROJECT_NAME = "pilot"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class PilotHookSpec:
    """Hook specifications for pilot plugins."""

    @hookspec
    def plug(self, data: Any) -> None:
        """Called when the host plugs the plugin in."""

    @hookspec
    def unplug(self, data: Any) -> None:
        """Called when the host plugs the plugin out."""
