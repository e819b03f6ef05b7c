#!/usr/bin/env python3
"""
Realtime network monitor -- latency, jitter, throughput and connectivity.

Usage::

    python monitor.py                          # one measurement, rich panel
    python monitor.py --simple                 # plain text
    python monitor.py --json                   # JSON to stdout
    python monitor.py -o result.json           # save to file
    python monitor.py --csv log.csv            # append CSV row
    python monitor.py --listen --interval 30   # measure every 30 s until Ctrl-C
    python monitor.py --listen --count 5       # stop after 5 snapshots
    python monitor.py --listen --connectivity  # also report connectivity changes
    python monitor.py --history                # show past results
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

from realnet.aggregator import NetworkSnapshot, StatsAggregator
from realnet.bridge import NetworkEngine
from realnet.config import Settings, load_config
from realnet.connectivity import ReachabilitySource
from realnet.constants import (
    EVENT_CONNECTIVITY_CHANGED,
    EVENT_NETWORK_STATS,
    MAX_INTERVAL,
    MIN_INTERVAL,
)
from realnet.history import load_history, save_result
from realnet.identity import SpeedtestIspLookup
from realnet.logging_config import configure_logging
from realnet.transport import HttpTransport
from ui.dashboard import (
    console,
    print_connectivity_change,
    print_header,
    print_history,
    print_snapshot,
)
from ui.output import append_csv, create_result_json, format_text_result, save_json

logger = logging.getLogger("realnet.monitor")


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

def _validate(interval: Optional[int], count: int) -> None:
    """Raise ``ValueError`` if any parameter is out of range."""
    if interval is not None and not MIN_INTERVAL <= interval <= MAX_INTERVAL:
        raise ValueError(f"Interval must be between {MIN_INTERVAL} and {MAX_INTERVAL} s")
    if count < 0:
        raise ValueError("Count must be >= 0")


def build_settings(overrides: Dict[str, Any]) -> Settings:
    """User config merged with non-None CLI *overrides*, validated."""
    config = load_config()
    config.update({k: v for k, v in overrides.items() if v is not None})
    return Settings.from_dict(config)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def _report(
    snapshot: NetworkSnapshot,
    *,
    json_output: bool,
    simple: bool,
    csv_file: Optional[str],
    title: str = "Results",
) -> Dict[str, Any]:
    result = create_result_json(snapshot)

    if json_output:
        print(json.dumps(result), flush=True)
    elif simple:
        print(format_text_result(snapshot), flush=True)
    else:
        print_snapshot(snapshot, title=title)

    if csv_file:
        append_csv(csv_file, snapshot)

    save_result(result)
    return result


def _make_engine(transport: HttpTransport, settings: Settings, sink) -> NetworkEngine:  # noqa: ANN001
    aggregator = StatsAggregator.for_transport(
        transport,
        settings,
        carrier=SpeedtestIspLookup(transport, url=settings.isp_url),
    )
    return NetworkEngine(aggregator, ReachabilitySource(transport, url=settings.latency_url), sink)


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------

async def run_once(
    settings: Settings,
    *,
    json_output: bool = False,
    simple: bool = False,
    output_file: Optional[str] = None,
    csv_file: Optional[str] = None,
) -> Dict[str, Any]:
    """Execute one ``runTest`` and report it."""
    show_ui = not json_output and not simple
    if show_ui:
        print_header()
        console.print("[dim]Measuring latency, throughput and identity...[/dim]")

    async with HttpTransport() as transport:
        engine = _make_engine(transport, settings, lambda event, payload: None)
        reply = await engine.handle("runTest")

    snapshot = NetworkSnapshot.from_dict(reply.value)
    result = _report(snapshot, json_output=json_output, simple=simple, csv_file=csv_file)

    if output_file:
        save_json(result, output_file)
        if show_ui:
            console.print(f"\n[green]Results saved to:[/green] {output_file}")

    return result


async def run_listen(
    settings: Settings,
    *,
    count: int = 0,
    connectivity: bool = False,
    json_output: bool = False,
    simple: bool = False,
    csv_file: Optional[str] = None,
) -> int:
    """Poll until Ctrl-C (or *count* snapshots).  Returns snapshots reported."""
    show_ui = not json_output and not simple
    done = asyncio.Event()
    emitted = 0

    def _sink(event: str, payload: Any) -> None:
        nonlocal emitted
        if event == EVENT_NETWORK_STATS:
            emitted += 1
            _report(
                NetworkSnapshot.from_dict(payload),
                json_output=json_output,
                simple=simple,
                csv_file=csv_file,
                title=f"Snapshot #{emitted}",
            )
            if count and emitted >= count:
                done.set()
        elif event == EVENT_CONNECTIVITY_CHANGED:
            if json_output:
                print(json.dumps({"event": event, "connected": payload}), flush=True)
            else:
                print_connectivity_change(payload)

    if show_ui:
        print_header()
        console.print(f"[dim]Polling every {settings.interval}s -- Ctrl-C to stop[/dim]\n")

    async with HttpTransport() as transport:
        engine = _make_engine(transport, settings, _sink)
        await engine.handle("startListening", {"interval": settings.interval})
        if connectivity:
            await engine.handle("startConnectivityListening")
        try:
            await done.wait()
        finally:
            await engine.aclose()

    return emitted


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main() -> None:
    parser = argparse.ArgumentParser(
        description="Realtime network monitor -- latency, jitter, throughput and connectivity",
    )
    # Output modes
    parser.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    parser.add_argument("--output", "-o", type=str, metavar="FILE", help="Save single-run result to JSON file")
    parser.add_argument("--csv", type=str, metavar="FILE", help="Append results as CSV rows")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")

    # Polling
    parser.add_argument("--listen", action="store_true", help="Measure repeatedly until interrupted")
    parser.add_argument("--interval", type=int, metavar="SECS", help="Seconds between polling cycles (default: 10)")
    parser.add_argument("--count", type=int, default=0, metavar="N", help="Stop listening after N snapshots (default: unlimited)")
    parser.add_argument("--connectivity", action="store_true", help="Report connectivity changes while listening")

    # Endpoints
    parser.add_argument("--latency-url", type=str, metavar="URL", help="Latency probe target")
    parser.add_argument("--download-url", type=str, metavar="URL", help="Download payload URL")
    parser.add_argument("--upload-url", type=str, metavar="URL", help="Upload sink URL")
    parser.add_argument("--ip-url", type=str, metavar="URL", help="Public IP echo service")

    # History
    parser.add_argument("--history", action="store_true", help="Show past results and exit")

    args = parser.parse_args()
    configure_logging(verbose=args.verbose)

    if args.history:
        print_history(load_history())
        return

    try:
        _validate(interval=args.interval, count=args.count)
        settings = build_settings({
            "interval": args.interval,
            "latency_url": args.latency_url,
            "download_url": args.download_url,
            "upload_url": args.upload_url,
            "ip_url": args.ip_url,
        })
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    csv_file = args.csv or load_config().get("csv_file") or None

    try:
        if args.listen:
            asyncio.run(
                run_listen(
                    settings,
                    count=args.count,
                    connectivity=args.connectivity,
                    json_output=args.json,
                    simple=args.simple,
                    csv_file=csv_file,
                )
            )
        else:
            asyncio.run(
                run_once(
                    settings,
                    json_output=args.json,
                    simple=args.simple,
                    output_file=args.output,
                    csv_file=csv_file,
                )
            )
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped by user[/yellow]")
    except (IOError, OSError) as exc:
        logger.debug("Output failed", exc_info=True)
        console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
