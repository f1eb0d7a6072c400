"""Terminal views of a scrape using Rich: a one-shot table and a live one."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import List

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from catchpoint_exporter import __version__
from catchpoint_exporter.collector.exporter import CatchpointCollector
from catchpoint_exporter.metrics import METRICS, UP, Observation

log = logging.getLogger(__name__)


def _format_labels(labels: dict) -> str:
    if not labels:
        return "[dim]-[/dim]"
    return escape(", ".join(f"{k}={v}" for k, v in labels.items()))


def _format_value(obs: Observation) -> str:
    if obs.name == UP:
        return "[bold green]1[/bold green]" if obs.value == 1 else "[bold red]0[/bold red]"
    if float(obs.value).is_integer():
        return f"{obs.value:,.0f}"
    return f"{obs.value:,.2f}"


def build_table(observations: List[Observation]) -> Table:
    """One row per observation, grouped in metric-family order."""
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="dim")
    table.add_column("Labels")
    table.add_column("Value", justify="right")

    order = {spec.name: i for i, spec in enumerate(METRICS)}
    for obs in sorted(observations, key=lambda o: order.get(o.name, len(order))):
        table.add_row(obs.name, _format_labels(obs.labels), _format_value(obs))
    return table


def build_display(observations: List[Observation], source_name: str) -> Panel:
    families = {obs.name for obs in observations}
    header = Text(f"catchpoint-exporter v{__version__}  |  {source_name}", style="bold white")
    header.append(f"\n{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}  ", style="dim")
    header.append(
        f"{len(observations)} observations in {len(families)}/{len(METRICS)} families",
        style="green" if len(families) == len(METRICS) else "yellow",
    )
    return Panel(Group(header, build_table(observations)), border_style="blue")


def print_snapshot(collector: CatchpointCollector, console: Console | None = None):
    console = console or Console()
    observations = collector.snapshot()
    console.print(build_display(observations, collector.name()))


def run_watch(collector: CatchpointCollector, refresh_interval: float = 30.0):
    console = Console()
    source_name = collector.name()
    log.info("Starting watch: source=%s, refresh=%.1fs", source_name, refresh_interval)

    with Live(console=console, refresh_per_second=1, screen=True) as live:
        try:
            while True:
                live.update(build_display(collector.snapshot(), source_name))
                time.sleep(refresh_interval)
        except KeyboardInterrupt:
            pass

    console.print("\n[dim]Watch stopped.[/dim]")
