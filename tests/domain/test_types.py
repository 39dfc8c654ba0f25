"""Tests for setting type descriptors and the type table."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from pilot.domain.types import (
    TYPE_REGISTRY,
    BoolType,
    NumberType,
    SelectionType,
    Status,
    get_type,
    parse_value,
    register_type,
    text,
)
from pilot.errors import UnknownTypeError


@pytest.fixture(autouse=True)
def _restore_registry() -> Generator[None]:
    original = TYPE_REGISTRY.copy()
    yield
    TYPE_REGISTRY.clear()
    TYPE_REGISTRY.update(original)


class TestText:
    def test_suggests_strings(self) -> None:
        assert text("hello") == ["hello"]

    def test_rejects_non_strings(self) -> None:
        assert text(42) == []

    def test_legacy_parse(self) -> None:
        conversion = parse_value(text, "abc")
        assert conversion.ok
        assert conversion.value == "abc"
        assert parse_value(text, 1).status is Status.INVALID


class TestNumber:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("42", 42), (" 4 2 ", 42), ("1.5", 1.5), (7, 7), (2.5, 2.5)],
    )
    def test_parse_valid(self, raw: object, expected: float) -> None:
        conversion = NumberType().parse(raw)
        assert conversion.ok
        assert conversion.value == expected

    def test_parse_invalid(self) -> None:
        conversion = NumberType().parse("forty")
        assert conversion.status is Status.INVALID
        assert "forty" in conversion.message

    def test_empty_is_incomplete(self) -> None:
        assert NumberType().parse("  ").status is Status.INCOMPLETE

    def test_bool_is_not_a_number(self) -> None:
        assert NumberType().parse(True).status is Status.INVALID

    def test_step(self) -> None:
        number = NumberType()
        assert number.increment(1) == 2
        assert number.decrement(1) == 0

    def test_suggest(self) -> None:
        assert NumberType().suggest("3") == [3]
        assert NumberType().suggest("x") == []


class TestSelection:
    def test_static_data(self) -> None:
        sel = SelectionType(["red", "green"])
        assert sel.data == ["red", "green"]
        assert sel.parse("green").value == "green"

    def test_lazy_data(self) -> None:
        options = ["a"]
        sel = SelectionType(lambda: options)
        options.append("b")
        assert sel.data == ["a", "b"]

    def test_partial_match_suggests(self) -> None:
        conversion = SelectionType(["green", "grey", "red"]).parse("gr")
        assert conversion.status is Status.INCOMPLETE
        assert conversion.suggestions == ["green", "grey"]

    def test_no_match_invalid(self) -> None:
        conversion = SelectionType(["red"]).parse("blue")
        assert conversion.status is Status.INVALID
        assert conversion.suggestions == ["red"]

    def test_returns_the_matching_option(self) -> None:
        marker = object()
        sel = SelectionType([marker, 2])
        assert sel.parse(marker).value is marker
        assert sel.parse(2).value == 2

    def test_equal_value_of_other_type_does_not_match(self) -> None:
        assert SelectionType([True, False]).parse(1).status is Status.INVALID
        conversion = SelectionType([1, 2]).parse(1.0)
        assert conversion.status is Status.INVALID

    def test_from_string(self) -> None:
        sel = SelectionType([1, 2])
        assert sel.from_string("2") == 2
        with pytest.raises(ValueError):
            sel.from_string("3")


class TestBool:
    @pytest.mark.parametrize(("raw", "expected"), [("true", True), ("FALSE", False), (True, True)])
    def test_parse(self, raw: object, expected: bool) -> None:
        conversion = BoolType().parse(raw)
        assert conversion.ok
        assert conversion.value is expected

    def test_to_string(self) -> None:
        assert BoolType().to_string(True) == "true"
        assert BoolType().to_string(False) == "false"

    def test_invalid(self) -> None:
        assert BoolType().parse("maybe").status is Status.INVALID


class TestRegistry:
    def test_builtin_lookup(self) -> None:
        assert get_type("text") is text
        assert isinstance(get_type("number"), NumberType)
        assert isinstance(get_type("bool"), BoolType)

    def test_none_defaults_to_text(self) -> None:
        assert get_type(None) is text

    def test_selection_subtype(self) -> None:
        sel = get_type("selection:vim|emacs")
        assert isinstance(sel, SelectionType)
        assert sel.data == ["vim", "emacs"]

    @pytest.mark.parametrize("name", ["colour", "number:int", "selection"])
    def test_unknown_type_fails_fast(self, name: str) -> None:
        with pytest.raises(UnknownTypeError) as excinfo:
            get_type(name)
        assert excinfo.value.type_name == name
        assert name in str(excinfo.value)

    def test_unknown_type_is_key_error(self) -> None:
        with pytest.raises(KeyError):
            get_type("nope")

    def test_register_custom(self) -> None:
        sel = SelectionType(["a"], name="letters")
        register_type("letters", sel)
        assert get_type("letters") is sel

    def test_register_legacy_callable(self) -> None:
        register_type("upper", lambda value: [str(value).upper()])
        assert parse_value(get_type("upper"), "x").value == "X"

    def test_register_rejects_malformed(self) -> None:
        with pytest.raises(TypeError):
            register_type("broken", object())  # type: ignore[arg-type]

    def test_register_rejects_builtin_name(self) -> None:
        with pytest.raises(ValueError, match="built-in"):
            register_type("number", NumberType())

    def test_register_rejects_empty_name(self) -> None:
        with pytest.raises(ValueError):
            register_type("  ", NumberType())
