"""
netrate entry point.

Usage:
    netrate --mock                          Mock data dashboard
    netrate                                 Live dashboard from entstat (AIX)
    netrate --output jsonl --push-url URL   Headless, push each poll to an aggregator
    netrate metrics                         List the registered metrics
    netrate sample --mock                   One poll, print values

Every option can also be set as NETRATE_<OPTION> in the environment.
"""

from __future__ import annotations

import logging
import logging.handlers
import time

import click

from netrate import __version__
from netrate.collector.entstat_sampler import EntstatSampler
from netrate.collector.mock_sampler import MockSampler
from netrate.config import CollectorConfig
from netrate.dashboard.terminal import run_dashboard, run_jsonl
from netrate.engine.module import NetRateModule
from netrate.reporting.http_reporter import HttpReporter


log = logging.getLogger("netrate")


def _configure_logging(verbose: bool, use_syslog: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    if use_syslog:
        handler = logging.handlers.SysLogHandler(address="/dev/log")
        handler.setLevel(logging.WARNING)
        handler.setFormatter(logging.Formatter("netrate: %(message)s"))
        logging.getLogger().addHandler(handler)


def _build_module(ctx) -> NetRateModule:
    config: CollectorConfig = ctx.obj["config"]
    if ctx.obj["mock"]:
        sampler = MockSampler(seed=ctx.obj["seed"], hang=ctx.obj["mock_hang"])
    else:
        sampler = EntstatSampler(config)
    module = NetRateModule(sampler, config)
    module.init()
    return module


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="netrate")
@click.option("--mock", is_flag=True, default=False, help="Use simulated entstat output")
@click.option("--mock-hang", multiple=True, help="Mock adapter that never answers (repeatable)")
@click.option("--seed", default=42, help="Seed for the mock generator")
@click.option("--refresh", default=5.0, help="Poll interval in seconds")
@click.option("--threshold", default=5.0, help="Minimum seconds between entstat runs per adapter")
@click.option("--timeout", default=5.0, help="Seconds before a hanging adapter is disabled")
@click.option("--tmax", default=60, help="Max reporting interval advertised per metric")
@click.option("--entstat", "entstat_path", default="/usr/bin/entstat", help="Path to entstat")
@click.option("--lsdev", "lsdev_path", default="/usr/sbin/lsdev", help="Path to lsdev")
@click.option("--push-url", default=None, help="POST every poll as JSON to this URL")
@click.option("--output", type=click.Choice(["tui", "jsonl"]), default="tui",
              help="Output mode: tui (Rich dashboard) or jsonl (one JSON line per poll)")
@click.option("--syslog", "use_syslog", is_flag=True, default=False,
              help="Also send warnings (disabled adapters) to syslog")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, mock: bool, mock_hang: tuple, seed: int, refresh: float, threshold: float,
        timeout: float, tmax: int, entstat_path: str, lsdev_path: str, push_url: str,
        output: str, use_syslog: bool, verbose: bool):
    """netrate - per-adapter Ethernet throughput from entstat."""
    _configure_logging(verbose, use_syslog)

    config = CollectorConfig(
        resample_threshold=threshold,
        sample_timeout=timeout,
        tmax=tmax,
        entstat_path=entstat_path,
        lsdev_path=lsdev_path,
    )
    try:
        config.validate()
    except ValueError as e:
        raise click.BadParameter(str(e))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["mock"] = mock
    ctx.obj["mock_hang"] = mock_hang
    ctx.obj["seed"] = seed

    if ctx.invoked_subcommand is not None:
        return

    module = _build_module(ctx)
    reporter = HttpReporter(push_url, source=module.sampler.name()) if push_url else None
    runner = run_jsonl if output == "jsonl" else run_dashboard

    try:
        runner(module, refresh_interval=refresh, reporter=reporter)
    finally:
        if reporter:
            reporter.close()
        module.close()


@cli.command()
@click.pass_context
def metrics(ctx):
    """List the metrics this host would export."""
    from rich.console import Console
    from rich.table import Table

    module = _build_module(ctx)
    try:
        console = Console()
        if not module.metrics_info:
            console.print("[yellow]No available Ethernet adapters found.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Units", no_wrap=True)
        table.add_column("Type")
        table.add_column("Format")
        table.add_column("tmax", justify="right")
        table.add_column("Description")

        for d in module.metrics_info:
            table.add_row(d.name, d.units, d.value_type, d.fmt, str(d.tmax), d.description)
        console.print(table)
    finally:
        module.close()


@cli.command()
@click.option("--no-wait", is_flag=True, default=False,
              help="Poll right after the baseline reading (all rates read 0.0)")
@click.pass_context
def sample(ctx, no_wait: bool):
    """Poll every metric once and print the values."""
    module = _build_module(ctx)
    try:
        if not no_wait:
            # Rates need a second reading past the resample threshold
            time.sleep(module.config.resample_threshold + 0.1)
        values = module.poll()
        for definition in module.metrics_info:
            click.echo(f"{definition.name} {definition.fmt % values[definition.name]} {definition.units}")
    finally:
        module.close()


def main():
    cli(auto_envvar_prefix="NETRATE")


if __name__ == "__main__":
    main()
