"""Terminal dashboard using Rich. Shows per-adapter rates, trend arrows and adapter status."""

from __future__ import annotations

import logging
import time
from collections import deque
from datetime import datetime
from typing import Dict, List, Optional

log = logging.getLogger(__name__)

from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.panel import Panel
from rich.layout import Layout
from rich.text import Text

from netrate import __version__
from netrate.engine.module import NetRateModule
from netrate.metrics import BYTES_RECEIVED, BYTES_SENT, PKTS_RECEIVED, PKTS_SENT
from netrate.reporting.http_reporter import HttpReporter


# How many polls to keep for trend comparison
HISTORY_SIZE = 30

MAX_CONSECUTIVE_ERRORS = 5


def _format_bytes_rate(value: float) -> str:
    for unit in ("B/s", "KB/s", "MB/s"):
        if abs(value) < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB/s"


def _trend_arrow(current: float, previous: Optional[float]) -> str:
    """Returns a ^ or v arrow. Throughput has no good direction, so no red/green."""
    if not previous:
        return ""

    pct_change = (current - previous) / abs(previous)
    threshold = 0.05  # ignore noise below 5%

    if abs(pct_change) < threshold:
        return "[dim]-[/dim]"

    return "[cyan]^[/cyan]" if pct_change > 0 else "[magenta]v[/magenta]"


def _evaluate_health(rows: List[dict]) -> tuple[str, str]:
    """Return (status_text, rich_style) for the header."""
    if not rows:
        return "NO ADAPTERS FOUND", "bold yellow"

    disabled = [row["interface"] for row in rows if not row["enabled"]]
    if not disabled:
        return "ALL ADAPTERS OK", "bold green"

    severity = "bold red" if len(disabled) == len(rows) else "bold yellow"
    return f"DISABLED: {', '.join(disabled)}", severity


def _get_lookback(history: deque, steps_back: int = 5) -> Optional[Dict[str, dict]]:
    """Grab the per-adapter rows from N polls ago for trend comparison."""
    if len(history) > steps_back:
        return history[-(steps_back + 1)]
    elif len(history) > 1:
        return history[0]
    return None


def build_display(
    rows: List[dict],
    source_name: str,
    history: deque,
) -> Layout:

    layout = Layout()
    prev = _get_lookback(history)

    status_text, status_style = _evaluate_health(rows)
    header = Text(f"  netrate v{__version__}  |  {source_name}", style="bold white on blue")
    header.append(f"\n  {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}  ", style="dim")
    header.append(f"  STATUS: {status_text}", style=status_style)

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Adapter", style="dim")
    table.add_column("Bytes in", justify="right")
    table.add_column("Bytes out", justify="right")
    table.add_column("Packets in", justify="right")
    table.add_column("Packets out", justify="right")
    table.add_column("Status", justify="center")

    for row in rows:
        name = row["interface"]
        if not row["enabled"]:
            table.add_row(name, "-", "-", "-", "-", "[bold red]DISABLED[/bold red]")
            continue

        before = prev.get(name) if prev else None

        def cell(kind: str, fmt) -> str:
            old = before[kind] if before and before["enabled"] else None
            return f"{fmt(row[kind])} {_trend_arrow(row[kind], old)}".rstrip()

        table.add_row(
            name,
            cell(BYTES_RECEIVED, _format_bytes_rate),
            cell(BYTES_SENT, _format_bytes_rate),
            cell(PKTS_RECEIVED, lambda v: f"{v:.1f}/s"),
            cell(PKTS_SENT, lambda v: f"{v:.1f}/s"),
            "[green]OK[/green]",
        )

    layout.split_column(
        Layout(Panel(header, border_style="blue"), size=4),
        Layout(Panel(table, title="Adapters", border_style="cyan"), name="body"),
        Layout(Panel(Text("  Press Ctrl+C to stop", style="dim"), border_style="dim"), size=3),
    )

    return layout


def _poll(module: NetRateModule, reporter: Optional[HttpReporter]) -> Dict[str, float]:
    values = module.poll()
    if reporter:
        reporter.report(values)
    return values


def run_dashboard(
    module: NetRateModule,
    refresh_interval: float = 5.0,
    reporter: Optional[HttpReporter] = None,
):

    console = Console()
    source_name = module.sampler.name()
    history: deque[Dict[str, dict]] = deque(maxlen=HISTORY_SIZE)

    log.info("Starting dashboard: source=%s, refresh=%.1fs", source_name, refresh_interval)
    console.print(f"\n[bold]Starting netrate v{__version__}...[/bold]")
    console.print(f"Source: {source_name}")
    console.print(f"Refresh: every {refresh_interval}s "
                  f"(adapters resampled after {module.config.resample_threshold}s)")
    if reporter:
        console.print("Reporting: HTTP push")
    console.print()

    consecutive_errors = 0

    with Live(console=console, refresh_per_second=1, screen=True) as live:
        try:
            while True:
                try:
                    _poll(module, reporter)
                    consecutive_errors = 0
                except Exception as e:
                    consecutive_errors += 1
                    log.warning("Poll failed (attempt %d/%d): %s",
                                consecutive_errors, MAX_CONSECUTIVE_ERRORS, e)
                    if consecutive_errors >= MAX_CONSECUTIVE_ERRORS:
                        log.error("Giving up after %d failed polls", MAX_CONSECUTIVE_ERRORS)
                        console.print(f"\n[bold red]Giving up after {MAX_CONSECUTIVE_ERRORS} failed polls: {e}[/bold red]")
                        break
                    error_text = Text(f"  Poll error (retry {consecutive_errors}/{MAX_CONSECUTIVE_ERRORS}): {e}", style="bold red")
                    live.update(Panel(error_text, border_style="red"))
                    time.sleep(refresh_interval)
                    continue

                rows = module.status()
                history.append({row["interface"]: row for row in rows})
                live.update(build_display(rows, source_name, history))
                time.sleep(refresh_interval)
        except KeyboardInterrupt:
            pass

    console.print("\n[dim]Dashboard stopped.[/dim]")


def run_jsonl(
    module: NetRateModule,
    refresh_interval: float = 5.0,
    reporter: Optional[HttpReporter] = None,
):
    """Non-interactive output mode: one JSON object per poll per line.

    Meant for cron jobs, log shippers and anything else without a TTY.
    """
    import json
    import sys

    source_name = module.sampler.name()
    log.info("Starting JSONL output: source=%s, refresh=%.1fs", source_name, refresh_interval)

    consecutive_errors = 0

    try:
        while True:
            try:
                values = _poll(module, reporter)
                consecutive_errors = 0
            except Exception as e:
                consecutive_errors += 1
                log.warning("Poll failed (attempt %d/%d): %s",
                            consecutive_errors, MAX_CONSECUTIVE_ERRORS, e)
                if consecutive_errors >= MAX_CONSECUTIVE_ERRORS:
                    log.error("Giving up after %d failed polls", MAX_CONSECUTIVE_ERRORS)
                    break
                time.sleep(refresh_interval)
                continue

            record = {
                "timestamp": datetime.now().isoformat(),
                "source": source_name,
                "metrics": values,
            }
            sys.stdout.write(json.dumps(record) + "\n")
            sys.stdout.flush()
            time.sleep(refresh_interval)
    except KeyboardInterrupt:
        pass
