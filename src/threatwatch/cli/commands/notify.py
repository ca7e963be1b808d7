# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CLI commands for notification channel management and testing."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Annotated

import typer

app = typer.Typer(
    name="notify",
    help="Manage and test notification channels",
    no_args_is_help=True,
)


@app.command()
def test(
    channel: Annotated[
        str | None,
        typer.Option(
            "--channel",
            "-c",
            help="Channel to test (log, slack, teams, pagerduty, email, webhook). Omit for all.",
        ),
    ] = None,
) -> None:
    """Send a test alert to verify channel configuration."""
    asyncio.run(_async_test(channel))


async def _async_test(channel: str | None) -> None:
    from rich.console import Console
    from rich.table import Table

    from threatwatch.core.config import get_settings
    from threatwatch.core.constants import Severity
    from threatwatch.notifications.events import AlertNotification
    from threatwatch.notifications.factory import configured_channels

    console = Console()
    channels = configured_channels(get_settings())

    test_notification = AlertNotification(
        alert_id="alert-test-000000",
        rule_id="rule-test",
        rule_name="Notification Test",
        severity=Severity.CRITICAL,
        title="threatwatch test alert",
        description="Test notification sent by 'threatwatch notify test'",
        source="threatwatch",
        indicators=["example.invalid"],
        indicator_count=1,
        timestamp=datetime.now(UTC),
    )

    table = Table(title="Notification Test Results")
    table.add_column("Channel", style="cyan")
    table.add_column("Result", style="bold")

    any_tested = False
    for ch in channels:
        if channel and ch.name != channel:
            continue
        any_tested = True
        try:
            success = await ch.send(test_notification)
        except Exception as exc:
            table.add_row(ch.name, f"[red]Error: {exc}[/red]")
            continue
        table.add_row(ch.name, "[green]OK[/green]" if success else "[red]Failed[/red]")

    if not any_tested:
        console.print(f"[yellow]Channel '{channel}' is not configured.[/yellow]")
        console.print("Set THREATWATCH_SLACK_WEBHOOK_URL, THREATWATCH_WEBHOOK_URL, etc.")
        raise typer.Exit(1)

    console.print(table)


@app.command(name="channels")
def list_channels() -> None:
    """List notification channels configured through settings."""
    from rich.console import Console
    from rich.table import Table

    from threatwatch.core.config import get_settings
    from threatwatch.notifications.factory import configured_channels

    console = Console()
    table = Table(title="Notification Channels")
    table.add_column("Channel", style="cyan")
    table.add_column("Configured", style="bold")

    for ch in configured_channels(get_settings()):
        table.add_row(ch.name, "[green]Yes[/green]" if ch.is_configured() else "[red]No[/red]")

    console.print(table)
