"""Shared pytest fixtures and test helpers for pilot tests."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


def make_plugin(name: str, **handlers: Any) -> SimpleNamespace:
    """Build a duck-typed plugin with the given action handlers."""
    return SimpleNamespace(name=name, **handlers)


class Recorder:
    """Listener that records every event it receives."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def __call__(self, event: Any) -> None:
        self.events.append(event)
