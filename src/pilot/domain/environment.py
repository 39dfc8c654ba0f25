"""Hierarchical key/value scopes with change notification.

An environment is the hub components use to share state (Unix ENV style)
and to talk to each other through events. Sub-environments delegate
missing keys to their parent, so shared components live in the root and
instance-specific ones in the children.

INVARIANT: Setting a key to its current value emits nothing.
INVARIANT: Change events fire only on the scope that was written.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pilot.domain.events import EventEmitter, is_change

if TYPE_CHECKING:
    from pilot.domain.settings import SettingsStore

logger = logging.getLogger(__name__)

_MISSING: Any = object()


@dataclass
class ChangeEvent:
    """Payload of ``change`` and ``change:<name>`` events."""

    name: str
    value: Any
    previous: Any
    env: Environment | None = None


class Environment(EventEmitter):
    """A scope of variables that may inherit from a parent scope.

    Parameters:
        parent: Scope that missing names resolve through. Not owned.
        settings: Settings store shared by the hierarchy. Defaults to the
            parent's settings.
    """

    def __init__(
        self,
        parent: Environment | None = None,
        *,
        settings: SettingsStore | None = None,
    ) -> None:
        super().__init__()
        self._parent = parent
        self._variables: dict[str, Any] = {}
        if settings is None and parent is not None:
            settings = parent.settings
        self.settings = settings

    @property
    def parent(self) -> Environment | None:
        return self._parent

    def child(self) -> Environment:
        """Create a sub-environment delegating to this one."""
        return Environment(self)

    def get(self, name: str, default: Any = None) -> Any:
        """Return *name* from the nearest scope that binds it, else *default*."""
        scope: Environment | None = self
        while scope is not None:
            if name in scope._variables:
                return scope._variables[name]
            scope = scope._parent
        return default

    def __contains__(self, name: object) -> bool:
        scope: Environment | None = self
        while scope is not None:
            if name in scope._variables:
                return True
            scope = scope._parent
        return False

    def local_names(self) -> Iterator[str]:
        """Names bound in this scope, excluding inherited ones."""
        return iter(list(self._variables))

    def set(self, variables: Mapping[str, Any], *, silent: bool = False) -> None:
        """Bind each name in *variables* on this scope.

        Keys are applied one at a time in mapping order; there is no
        rollback if a listener raises partway through a batch. Unless
        *silent*, every changed key emits ``change`` then ``change:<name>``.
        """
        for name, value in list(variables.items()):
            previous = self._variables.get(name, _MISSING)
            if previous is not _MISSING and not is_change(previous, value):
                continue
            self._variables[name] = value
            if silent:
                continue
            event = ChangeEvent(
                name=name,
                value=value,
                previous=None if previous is _MISSING else previous,
            )
            logger.debug("Environment variable changed: %s", name)
            self.emit("change", event)
            self.emit(f"change:{name}", event)

    def emit(self, type: str, event: Any) -> None:
        """Stamp ``event.env`` with this scope, then dispatch."""
        if isinstance(event, MutableMapping):
            event["env"] = self
        else:
            event.env = self
        super().emit(type, event)

    def __repr__(self) -> str:
        depth = 0
        scope = self._parent
        while scope is not None:
            depth += 1
            scope = scope._parent
        return f"<Environment depth={depth} names={sorted(self._variables)}>"
