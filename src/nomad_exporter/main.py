"""
nomad_exporter entry point.

Usage:
    nomad_exporter --nomad.address http://nomad:4646     Serve /metrics on :9000
    nomad_exporter --mock                                Serve metrics from a mock agent
    nomad_exporter --nomad.address http://nomad:4646 check    One-shot scrape and print
"""

from __future__ import annotations

import logging

import click
from prometheus_client import CollectorRegistry

from nomad_exporter import __version__
from nomad_exporter.collector.mock_collector import MockHealthSource
from nomad_exporter.collector.nomad_client import DEFAULT_ADDRESS, NomadHealthSource
from nomad_exporter.exceptions import ScrapeError
from nomad_exporter.exporter import NomadExporter
from nomad_exporter.server import create_app, serve


log = logging.getLogger("nomad_exporter")


def _build_source(ctx):
    if ctx.obj["mock"]:
        return MockHealthSource()
    return NomadHealthSource(
        address=ctx.obj["address"],
        region=ctx.obj["region"],
        timeout_seconds=ctx.obj["timeout"],
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="nomad_exporter")
@click.option("--web.listen-address", "listen_address", default=":9000", show_default=True,
              help="Address to listen on for web interface and telemetry.")
@click.option("--web.telemetry-path", "metrics_path", default="/metrics", show_default=True,
              help="Path under which to expose metrics.")
@click.option("--nomad.address", "address", envvar="NOMAD_ADDR", default=DEFAULT_ADDRESS,
              show_default=True, help="HTTP API address of a Nomad agent.")
@click.option("--nomad.region", "region", envvar="NOMAD_REGION", default="",
              help="Nomad region to track.")
@click.option("--nomad.timeout", "timeout", default=5.0, show_default=True,
              help="Timeout in seconds for each request to Nomad.")
@click.option("--mock", is_flag=True, default=False, help="Use a simulated Nomad agent")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, listen_address: str, metrics_path: str, address: str, region: str,
        timeout: float, mock: bool, verbose: bool):
    """Prometheus exporter for the Nomad health endpoint."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["mock"] = mock
    ctx.obj["address"] = address
    ctx.obj["region"] = region
    ctx.obj["timeout"] = timeout

    if ctx.invoked_subcommand is not None:
        return

    source = _build_source(ctx)
    exporter = NomadExporter(source)

    # Dedicated registry: no process/platform/gc collectors, only ours
    registry = CollectorRegistry()
    registry.register(exporter)

    log.info("Starting nomad_exporter %s, source=%s", __version__, source.name())
    try:
        serve(create_app(registry, metrics_path), listen_address)
    except (OSError, ValueError) as e:
        log.critical("Can't listen on %s: %s", listen_address, e)
        raise SystemExit(1)
    except KeyboardInterrupt:
        pass
    finally:
        source.close()


@cli.command()
@click.pass_context
def check(ctx):
    """Scrape once and print every metric value."""
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    source = _build_source(ctx)
    exporter = NomadExporter(source)
    console = Console()

    try:
        exporter.scrape()
    except ScrapeError as e:
        console.print(f"\n[bold red]DOWN[/bold red]  {source.name()}")
        console.print(f"      [dim]{escape(str(e))}[/dim]\n")
        raise SystemExit(1)
    finally:
        source.close()

    console.print(f"\n[bold green]UP[/bold green]  {source.name()}\n")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for name, value in exporter.snapshot().items():
        table.add_row(f"[cyan]{escape(name)}[/cyan]", f"{value:g}")
    console.print(table)
    console.print()


if __name__ == "__main__":
    cli()
