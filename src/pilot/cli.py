"""Root CLI group for pilot with global flags and host commands."""

from __future__ import annotations

import json

import click

from pilot import __version__
from pilot.config.logging import configure_logging
from pilot.config.settings import PilotSettings
from pilot.host import BroadcastReport, Host


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The host is created lazily so ``--help`` and ``--version`` never
    trigger plugin discovery.
    """

    def __init__(self, settings: PilotSettings) -> None:
        self.settings = settings
        self._host: Host | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def host(self) -> Host:
        if self._host is None:
            self._host = Host(self.settings)
            self._host.load_plugins()
        return self._host


def _echo_failures(report: BroadcastReport) -> None:
    for failure in report.failures:
        name = getattr(failure.plugin, "name", failure.plugin)
        click.echo(f"{report.action} failed for {name}: {failure.error}", err=True)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="pilot")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """pilot — in-process extension host."""
    settings = PilotSettings.from_cli(
        config_path=config_path,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.pass_obj
def plugins(app: AppContext) -> None:
    """List discovered plugins in broadcast order."""
    for plugin in app.host.catalog.registry:
        click.echo(plugin.name)


@cli.command()
@click.pass_obj
def plug(app: AppContext) -> None:
    """Plug every discovered plugin in, then out again."""
    host = app.host
    reports = [host.plug(), host.unplug()]
    for report in reports:
        _echo_failures(report)
        click.echo(f"{report.action}: {len(report.delivered)} delivered")
    if not all(report.ok for report in reports):
        raise SystemExit(1)


@cli.command()
@click.pass_obj
def env(app: AppContext) -> None:
    """Print the root environment as JSON."""
    root = app.host.env
    variables = {name: root.get(name) for name in sorted(root.local_names())}
    click.echo(json.dumps(variables, indent=2, default=str))
