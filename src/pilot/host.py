"""Host bootstrap: settings -> root environment -> catalog of discovered plugins."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pilot.domain.environment import Environment
from pilot.domain.settings import SettingsStore
from pilot.errors import PluginActionError
from pilot.plugins.catalog import ErrorEvent, PluginCatalog, PluginEvent
from pilot.plugins.discovery import discover_plugins

if TYPE_CHECKING:
    from pilot.config.settings import PilotSettings

logger = logging.getLogger(__name__)


@dataclass
class BroadcastReport:
    """What happened during one ``plug``/``unplug`` broadcast."""

    action: str
    delivered: list[str] = field(default_factory=list)
    failures: list[ErrorEvent] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Re-raise the first isolated failure as :class:`PluginActionError`."""
        if self.failures:
            first = self.failures[0]
            raise PluginActionError(first.action, first.plugin, first.error) from first.error


class Host:
    """Wires configuration, a root environment and a plugin catalog together."""

    def __init__(self, settings: PilotSettings, store: SettingsStore | None = None) -> None:
        self.settings = settings
        self.env = Environment(settings=store if store is not None else SettingsStore())
        self.env.set(settings.environment.variables, silent=True)
        self.catalog = PluginCatalog()

    def load_plugins(self) -> list[str]:
        """Discover configured plugins and register them. Returns their names."""
        cfg = self.settings.plugins
        found = discover_plugins(
            group=cfg.entry_point_group,
            local_dir=cfg.local_dir,
            disabled=cfg.disabled,
        )
        self.catalog.register(found)
        return [plugin.name for plugin in self.catalog.registry]

    def plug(self) -> BroadcastReport:
        return self._broadcast("plug")

    def unplug(self) -> BroadcastReport:
        return self._broadcast("unplug")

    def _broadcast(self, action: str) -> BroadcastReport:
        report = BroadcastReport(action=action)

        def delivered(event: PluginEvent) -> None:
            report.delivered.append(event.plugin.name)

        def failed(event: ErrorEvent) -> None:
            report.failures.append(event)

        data: dict[str, Any] = {"env": self.env}
        self.catalog.on(action, delivered)
        self.catalog.on("error", failed)
        try:
            if action == "plug":
                self.catalog.plug(data)
            else:
                self.catalog.unplug(data)
        finally:
            self.catalog.off(action, delivered)
            self.catalog.off("error", failed)
        logger.debug(
            "Broadcast %s: %d delivered, %d failed",
            action,
            len(report.delivered),
            len(report.failures),
        )
        return report
