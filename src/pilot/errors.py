"""Exception taxonomy.

INVARIANT: Failures are isolated at the broadcast boundary (one plugin per
catch) and propagate everywhere else.
"""

from __future__ import annotations

from typing import Any


class PilotError(Exception):
    """Base class for all pilot errors."""


class UnknownTypeError(PilotError, KeyError):
    """Raised when a setting type or subtype is referenced by an unknown name."""

    def __init__(self, name: str) -> None:
        self.type_name = name
        super().__init__(f"Unknown setting type {name!r}")

    def __str__(self) -> str:
        return str(self.args[0])


class SettingError(PilotError, ValueError):
    """Raised when a setting rejects a value."""


class PluginActionError(PilotError):
    """A plugin's action handler failed during a broadcast.

    The catalog never raises this itself: the ``"error"`` event carries the
    original exception. Callers that collect those events can re-raise one
    with the action and plugin attached.
    """

    def __init__(self, action: str, plugin: Any, error: BaseException) -> None:
        self.action = action
        self.plugin = plugin
        self.error = error
        name = getattr(plugin, "name", plugin)
        super().__init__(f"Plugin {name!r} failed on {action!r}: {error}")
