"""
Rich-based terminal dashboard for network snapshots.

All formatting helpers live in ``realnet.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from realnet.aggregator import NetworkSnapshot
from realnet.history import format_history_table, sparkline
from realnet.stats import format_latency, format_speed

console = Console()


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header() -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Realtime Network[/bold cyan]\n"
            "[dim]Latency, jitter, throughput and connectivity monitoring[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def _speed_cell(mbps: float, color: str) -> str:
    if mbps <= 0:
        return "[red]failed[/red]"
    return f"[bold {color}]{format_speed(mbps)}[/bold {color}]"


def print_snapshot(snapshot: NetworkSnapshot, title: str = "Results") -> None:
    """Print one snapshot as a results panel."""
    ip = snapshot.public_ip or "[red]unavailable[/red]"
    console.print(
        Panel.fit(
            f"[bold cyan]ISP:[/bold cyan] {snapshot.isp_name}   "
            f"[bold cyan]IP:[/bold cyan] {ip}\n\n"
            f"[bold white]   Ping:[/bold white]  [bold yellow]{format_latency(snapshot.ping_ms)}[/bold yellow]  "
            f"[dim](jitter: {snapshot.jitter_ms} ms)[/dim]\n"
            f"[bold white]   Download:[/bold white]  {_speed_cell(snapshot.download_speed_mbps, 'green')}\n"
            f"[bold white]   Upload:[/bold white]  {_speed_cell(snapshot.upload_speed_mbps, 'blue')}",
            title=f"[bold]{title}[/bold]",
            border_style="cyan",
        )
    )


def print_connectivity_change(connected: bool) -> None:
    stamp = datetime.now().strftime("%H:%M:%S")
    if connected:
        console.print(f"[dim]{stamp}[/dim] [bold green]Connected[/bold green]")
    else:
        console.print(f"[dim]{stamp}[/dim] [bold red]Disconnected[/bold red]")


def print_history(entries: List[Dict[str, Any]]) -> None:
    """Print saved snapshots as a table with sparklines underneath."""
    if not entries:
        console.print("[dim]No history yet.[/dim]")
        return

    rows = format_history_table(entries)

    table = Table(title="History", box=box.ROUNDED)
    table.add_column("Time", style="dim")
    table.add_column("Ping", justify="right")
    table.add_column("Jitter", justify="right")
    table.add_column("Download", justify="right", style="green")
    table.add_column("Upload", justify="right", style="blue")
    table.add_column("IP")
    table.add_column("ISP")

    for r in rows:
        table.add_row(
            r["timestamp"],
            f"{r['ping']} ms",
            f"{r['jitter']} ms",
            format_speed(r["download"]),
            format_speed(r["upload"]),
            r["ip"] or "-",
            r["isp"] or "-",
        )
    console.print(table)

    if len(rows) > 1:
        console.print(
            Panel(
                f"Download [green]{sparkline([r['download'] for r in rows])}[/green]\n"
                f"Upload   [blue]{sparkline([r['upload'] for r in rows])}[/blue]\n"
                f"Ping     [yellow]{sparkline([r['ping'] for r in rows])}[/yellow]",
                title="Trend",
            )
        )
