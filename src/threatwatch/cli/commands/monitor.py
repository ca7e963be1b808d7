# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CLI commands that run the monitoring engine in-process."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Annotated

import typer

from threatwatch.core.config import get_settings
from threatwatch.monitoring.service import MonitoringService

logger = logging.getLogger("threatwatch.cli.monitor")


def build_service() -> MonitoringService:
    """Monitoring service wired from the current settings."""
    return MonitoringService.from_settings(get_settings())


def cycle(
    as_json: Annotated[bool, typer.Option("--json", help="Print new alerts as JSON")] = False,
) -> None:
    """Run one monitoring cycle and print the alerts it produced."""
    alerts, service = asyncio.run(_async_cycle())

    if as_json:
        typer.echo(json.dumps([a.model_dump(mode="json") for a in alerts], indent=2))
        return

    from threatwatch.cli.formatters.console import alerts_table, console

    report = service.last_cycle
    if report is not None:
        for key, message in sorted(report.pattern_errors.items()):
            console.print(f"[red]Pattern error[/red] {key}: {message}")
        for key, message in sorted(report.source_errors.items()):
            console.print(f"[yellow]Source error[/yellow] {key}: {message}")
        for key, message in sorted(report.rule_errors.items()):
            console.print(f"[red]Rule error[/red] {key}: {message}")

    if not alerts:
        console.print("[green]No new alerts.[/green]")
        return
    console.print(alerts_table(alerts, title=f"New Alerts ({len(alerts)})"))


async def _async_cycle():
    service = build_service()
    alerts = await service.run_monitoring_cycle()
    await service.drain_notifications()
    return alerts, service


def dashboard(
    run_cycle: Annotated[
        bool,
        typer.Option("--run-cycle/--no-cycle", help="Run a cycle before summarizing"),
    ] = True,
    as_json: Annotated[bool, typer.Option("--json", help="Print the dashboard as JSON")] = False,
) -> None:
    """Show the monitoring dashboard."""
    service = build_service()
    if run_cycle:
        asyncio.run(_run_and_drain(service))
    data = service.get_dashboard()

    if as_json:
        typer.echo(data.model_dump_json(indent=2))
        return

    from threatwatch.cli.formatters.console import format_dashboard

    format_dashboard(data, service.get_feed_statuses())


async def _run_and_drain(service: MonitoringService) -> None:
    await service.run_monitoring_cycle()
    await service.drain_notifications()


def watch(
    interval: Annotated[
        float | None,
        typer.Option("--interval", "-i", help="Seconds between cycles (default from settings)"),
    ] = None,
    max_cycles: Annotated[
        int | None,
        typer.Option("--max-cycles", help="Stop after this many cycles"),
    ] = None,
) -> None:
    """Poll continuously and stream new alerts to the console."""
    from threatwatch.core.logging import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    try:
        asyncio.run(_async_watch(interval or settings.cycle_interval_seconds, max_cycles))
    except KeyboardInterrupt:
        typer.echo("Stopped.")


async def _async_watch(interval: float, max_cycles: int | None) -> None:
    from threatwatch.cli.formatters.console import console, print_alert

    service = build_service()
    unsubscribe = service.subscribe_to_alerts(print_alert)
    console.print(
        f"[bold]Watching {len(service.list_rules())} rule(s) every {interval:g}s[/bold]"
    )

    completed = 0
    try:
        while max_cycles is None or completed < max_cycles:
            if completed:
                await asyncio.sleep(interval)
            try:
                await service.run_monitoring_cycle()
            except Exception:
                logger.exception("Monitoring cycle failed")
            completed += 1
    finally:
        unsubscribe()
        await service.drain_notifications()
