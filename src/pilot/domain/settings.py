"""Generic settings layer over the type table.

A :class:`Setting` resolves its type when it is created, so a typo in a
type name fails at definition time rather than on first use. The store is
an event emitter and is injected into environments explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from pilot.domain.events import EventEmitter, is_change
from pilot.domain.types import SettingType, Suggest, get_type, parse_value
from pilot.errors import SettingError

logger = logging.getLogger(__name__)


@dataclass
class Setting:
    """A named, typed, defaulted value."""

    name: str
    type: str | None = None
    default: Any = None
    description: str = ""
    descriptor: SettingType | Suggest = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.descriptor = get_type(self.type)


@dataclass
class SettingChange:
    """Payload of ``change`` and ``change:<name>`` on a settings store."""

    setting: Setting
    value: Any
    previous: Any


class SettingsStore(EventEmitter):
    """Holds setting definitions and their current values."""

    def __init__(self, settings: Iterable[Setting] = ()) -> None:
        super().__init__()
        self._settings: dict[str, Setting] = {}
        self._values: dict[str, Any] = {}
        for setting in settings:
            self.add(setting)

    def add(self, setting: Setting) -> Setting:
        if setting.name in self._settings:
            raise SettingError(f"Setting {setting.name!r} is already defined")
        self._settings[setting.name] = setting
        return setting

    def remove(self, name: str) -> None:
        self._settings.pop(name, None)
        self._values.pop(name, None)

    def definition(self, name: str) -> Setting:
        try:
            return self._settings[name]
        except KeyError:
            raise SettingError(f"Unknown setting {name!r}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._settings

    def __iter__(self) -> Iterator[Setting]:
        return iter(list(self._settings.values()))

    def get(self, name: str) -> Any:
        """Current value of *name*, falling back to its default."""
        setting = self.definition(name)
        return self._values.get(name, setting.default)

    def set(self, name: str, value: Any) -> None:
        """Parse *value* through the setting's type and store it.

        Raises:
            SettingError: Unknown setting, or the type rejects the value.
        """
        setting = self.definition(name)
        conversion = parse_value(setting.descriptor, value)
        if not conversion.ok:
            raise SettingError(f"Invalid value for {name!r}: {conversion.message}")
        previous = self.get(name)
        self._values[name] = conversion.value
        if is_change(previous, conversion.value):
            logger.debug("Setting changed: %s", name)
            event = SettingChange(setting=setting, value=conversion.value, previous=previous)
            self.emit("change", event)
            self.emit(f"change:{name}", event)

    def reset(self, name: str) -> None:
        """Drop any stored value so *name* reads its default again."""
        setting = self.definition(name)
        previous = self.get(name)
        self._values.pop(name, None)
        if is_change(previous, setting.default):
            event = SettingChange(setting=setting, value=setting.default, previous=previous)
            self.emit("change", event)
            self.emit(f"change:{name}", event)

    def as_strings(self) -> dict[str, str]:
        """Current values rendered through each type's ``to_string``."""
        rendered: dict[str, str] = {}
        for setting in self._settings.values():
            value = self.get(setting.name)
            to_string = getattr(setting.descriptor, "to_string", None)
            rendered[setting.name] = to_string(value) if to_string else str(value)
        return rendered
