"""Setting type descriptors and the type table.

A descriptor is either a legacy suggestion callable ``(input) -> list`` or
a :class:`SettingType` exposing ``parse`` and ``to_string``. Steppable types
add ``increment``/``decrement``; selection types add ``data`` (a sequence
or a zero-argument callable producing one) and ``from_string``.

Types are looked up by name. Unknown names fail immediately with
:class:`~pilot.errors.UnknownTypeError`.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pilot.errors import UnknownTypeError

Suggest = Callable[[Any], list[Any]]


class Status(StrEnum):
    """Outcome of parsing user input."""

    VALID = "valid"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"


@dataclass(frozen=True)
class Conversion:
    """Result of :meth:`SettingType.parse`."""

    value: Any = None
    status: Status = Status.VALID
    message: str = ""
    suggestions: list[Any] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is Status.VALID


class SettingType(ABC):
    """Contract for a structured setting type."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Type identifier (e.g. 'number', 'bool')."""
        ...

    @abstractmethod
    def parse(self, value: Any) -> Conversion:
        """Convert raw input into a typed value."""
        ...

    @abstractmethod
    def to_string(self, value: Any) -> str:
        """Render a typed value for display."""
        ...


def text(input: Any) -> list[Any]:
    """'text' is the default if no type is given."""
    return [input] if isinstance(input, str) else []


class TextType(SettingType):
    @property
    def name(self) -> str:
        return "text"

    def parse(self, value: Any) -> Conversion:
        if value is None:
            return Conversion(value="")
        return Conversion(value=str(value))

    def to_string(self, value: Any) -> str:
        return "" if value is None else str(value)


class NumberType(SettingType):
    """Numbers, without distinguishing integers from floats in input."""

    _WHITESPACE = re.compile(r"\s")

    @property
    def name(self) -> str:
        return "number"

    def parse(self, value: Any) -> Conversion:
        if isinstance(value, bool):
            return Conversion(status=Status.INVALID, message=f"Not a number: {value!r}")
        if isinstance(value, int | float):
            return Conversion(value=value)
        raw = self._WHITESPACE.sub("", str(value if value is not None else ""))
        if not raw:
            return Conversion(status=Status.INCOMPLETE, message="A number is required")
        try:
            number: int | float = int(raw)
        except ValueError:
            try:
                number = float(raw)
            except ValueError:
                return Conversion(status=Status.INVALID, message=f"Not a number: {value!r}")
        return Conversion(value=number)

    def suggest(self, input: Any) -> list[Any]:
        conversion = self.parse(input)
        return [conversion.value] if conversion.ok else []

    def increment(self, value: int | float) -> int | float:
        return value + 1

    def decrement(self, value: int | float) -> int | float:
        return value - 1

    def to_string(self, value: Any) -> str:
        return str(value)


class SelectionType(SettingType):
    """A choice from a fixed or lazily computed set of options.

    Parameters:
        data: The options, or a zero-argument callable returning them.
        name: Type identifier.
    """

    def __init__(
        self,
        data: Sequence[Any] | Callable[[], Sequence[Any]],
        name: str = "selection",
    ) -> None:
        self._data = data
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def data(self) -> list[Any]:
        options = self._data() if callable(self._data) else self._data
        return list(options)

    def to_string(self, value: Any) -> str:
        return str(value)

    def from_string(self, text: str) -> Any:
        for option in self.data:
            if self.to_string(option) == text:
                return option
        raise ValueError(f"{text!r} is not one of {self.names()}")

    def names(self) -> list[str]:
        return [self.to_string(option) for option in self.data]

    def parse(self, value: Any) -> Conversion:
        options = self.data
        if not isinstance(value, str):
            for option in options:
                if option is value or (type(option) is type(value) and option == value):
                    return Conversion(value=option)
        text = self.to_string(value)
        for option in options:
            if self.to_string(option) == text:
                return Conversion(value=option)
        prefixed = [o for o in options if self.to_string(o).startswith(text)]
        if prefixed and text:
            return Conversion(
                status=Status.INCOMPLETE,
                message=f"Ambiguous or partial choice: {text!r}",
                suggestions=prefixed,
            )
        return Conversion(
            status=Status.INVALID,
            message=f"{text!r} is not one of {self.names()}",
            suggestions=options,
        )


class BoolType(SelectionType):
    def __init__(self) -> None:
        super().__init__([True, False], name="bool")

    def to_string(self, value: Any) -> str:
        return "true" if value else "false"

    def parse(self, value: Any) -> Conversion:
        if isinstance(value, bool):
            return Conversion(value=value)
        return super().parse(str(value).strip().lower())


_BUILTINS: dict[str, SettingType | Suggest] = {
    "text": text,
    "number": NumberType(),
    "bool": BoolType(),
}

TYPE_REGISTRY: dict[str, SettingType | Suggest] = dict(_BUILTINS)


def _is_descriptor(descriptor: object) -> bool:
    if isinstance(descriptor, SettingType):
        return True
    if callable(getattr(descriptor, "parse", None)) and callable(
        getattr(descriptor, "to_string", None)
    ):
        return True
    return callable(descriptor)


def register_type(name: str, descriptor: SettingType | Suggest) -> None:
    """Add a type descriptor to :data:`TYPE_REGISTRY`.

    Raises:
        ValueError: Empty name, or a name that shadows a built-in type.
        TypeError: *descriptor* exposes neither the legacy nor the
            structured contract.
    """
    normalized = name.strip()
    if not normalized:
        raise ValueError("Type name must not be empty")
    if normalized in _BUILTINS:
        raise ValueError(f"Type {normalized!r} conflicts with a built-in type")
    if not _is_descriptor(descriptor):
        raise TypeError(
            f"Type {normalized!r} must be a suggestion callable or expose parse/to_string"
        )
    TYPE_REGISTRY[normalized] = descriptor


def get_type(name: str | None) -> SettingType | Suggest:
    """Resolve a type by name. ``None`` means 'text'.

    ``selection:a|b|c`` builds an ad-hoc selection over the listed options.

    Raises:
        UnknownTypeError: No such type or subtype.
    """
    if name is None:
        return TYPE_REGISTRY["text"]
    base, _, subtype = name.partition(":")
    if base == "selection" and subtype:
        return SelectionType(subtype.split("|"), name=name)
    if subtype:
        raise UnknownTypeError(name)
    try:
        return TYPE_REGISTRY[base]
    except KeyError:
        raise UnknownTypeError(name) from None


def parse_value(descriptor: SettingType | Suggest, value: Any) -> Conversion:
    """Parse *value* with either kind of descriptor."""
    if isinstance(descriptor, SettingType) or hasattr(descriptor, "parse"):
        return descriptor.parse(value)  # type: ignore[union-attr]
    candidates = descriptor(value)
    if not candidates:
        return Conversion(status=Status.INVALID, message=f"No match for {value!r}")
    return Conversion(value=candidates[0], suggestions=list(candidates))
