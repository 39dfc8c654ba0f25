"""Tests for structlog routing of pilot log records."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Generator
from typing import Any

import pytest
import structlog

from pilot.config.logging import build_handler, configure_logging
from pilot.plugins.catalog import PluginCatalog
from tests.conftest import make_plugin


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root and pilot logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pilot = logging.getLogger("pilot")
    pilot_level = pilot.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pilot.setLevel(pilot_level)


def _lines(stream: io.StringIO) -> list[dict[str, Any]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def _boom(data: object) -> None:
    raise RuntimeError("kaput")


class TestPluginFields:
    def test_failure_carries_plugin_and_action(self) -> None:
        stream = io.StringIO()
        configure_logging(log_json=True, stream=stream)

        PluginCatalog([make_plugin("fragile", plug=_boom)]).plug(None)

        [record] = _lines(stream)
        assert record["level"] == "warning"
        assert record["logger"] == "pilot.plugins.catalog"
        assert record["plugin"] == "fragile"
        assert record["action"] == "plug"
        assert "kaput" in record["exception"]
        assert "timestamp" in record

    def test_one_record_per_failing_plugin(self) -> None:
        stream = io.StringIO()
        configure_logging(log_json=True, stream=stream)
        catalog = PluginCatalog(
            [
                make_plugin("a", unplug=_boom),
                make_plugin("b"),
                make_plugin("c", unplug=_boom),
            ]
        )

        catalog.unplug(None)

        assert [(r["plugin"], r["action"]) for r in _lines(stream)] == [
            ("a", "unplug"),
            ("c", "unplug"),
        ]

    def test_registration_fields_when_verbose(self) -> None:
        stream = io.StringIO()
        configure_logging(verbose=True, log_json=True, stream=stream)

        PluginCatalog([make_plugin("probe")]).unregister(["probe"])

        records = _lines(stream)
        assert [r["event"] for r in records] == [
            "Registered plugin: probe",
            "Unregistered plugin: probe",
        ]
        assert {r["plugin"] for r in records} == {"probe"}
        assert all("action" not in r for r in records)


class TestLevels:
    def test_quiet_by_default(self) -> None:
        stream = io.StringIO()
        configure_logging(log_json=True, stream=stream)
        PluginCatalog([make_plugin("a")]).plug(None)
        assert stream.getvalue() == ""
        assert logging.getLogger("pilot").level == logging.WARNING

    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("pilot").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING


class TestHandler:
    def test_structlog_records_share_the_handler(self) -> None:
        stream = io.StringIO()
        configure_logging(log_json=True, stream=stream)
        structlog.get_logger("pilot.host").warning("host ready", plugins=2)
        [record] = _lines(stream)
        assert record["event"] == "host ready"
        assert record["plugins"] == 2
        assert record["logger"] == "pilot.host"

    def test_console_mode_mentions_plugin(self) -> None:
        stream = io.StringIO()
        logger = logging.getLogger("pilot.tests.console")
        handler = build_handler(stream=stream)
        logger.addHandler(handler)
        try:
            logger.warning("Plugin x failed", extra={"plugin": "x", "action": "plug"})
        finally:
            logger.removeHandler(handler)
        output = stream.getvalue()
        assert "Plugin x failed" in output
        assert "plugin" in output

    def test_repeated_configuration_keeps_one_handler(self) -> None:
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1
