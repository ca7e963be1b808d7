# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich console output for rules, alerts and the dashboard."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from threatwatch import __version__
from threatwatch.core.constants import FeedState, Severity
from threatwatch.models.alert import ThreatAlert
from threatwatch.models.dashboard import FeedStatus, MonitoringDashboard
from threatwatch.models.rule import MonitoringRule

console = Console()

SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
}


def _severity(value: Severity) -> str:
    color = SEVERITY_COLORS.get(value, "white")
    return f"[{color}]{value.upper()}[/{color}]"


def _ts(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def rules_table(rules: Sequence[MonitoringRule]) -> Table:
    table = Table(title="Monitoring Rules")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Severity")
    table.add_column("Match")
    table.add_column("Pattern")
    table.add_column("Sources")
    table.add_column("Cooldown", justify="right")
    table.add_column("Triggers", justify="right")
    table.add_column("Enabled")

    for rule in rules:
        table.add_row(
            rule.id,
            rule.name,
            _severity(rule.severity),
            rule.match_type,
            rule.pattern if len(rule.pattern) <= 40 else rule.pattern[:37] + "...",
            ", ".join(f"{s.name} ({s.source_type})" for s in rule.sources) or "-",
            f"{rule.cooldown_minutes}m",
            str(rule.trigger_count),
            "yes" if rule.enabled else "no",
        )
    return table


def alerts_table(alerts: Sequence[ThreatAlert], *, title: str = "Threat Alerts") -> Table:
    table = Table(title=title)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Rule")
    table.add_column("Title", style="bold")
    table.add_column("Source")
    table.add_column("Indicators")
    table.add_column("Status")

    for alert in alerts:
        table.add_row(
            _ts(alert.timestamp),
            _severity(alert.severity),
            alert.rule_name,
            alert.title,
            alert.source,
            ", ".join(alert.indicators[:3]) + (" ..." if len(alert.indicators) > 3 else ""),
            alert.status,
        )
    return table


def print_alert(alert: ThreatAlert) -> None:
    """One-line alert summary for streaming output."""
    console.print(
        f"{_ts(alert.timestamp)} {_severity(alert.severity)} "
        f"[bold]{alert.title}[/bold] [dim]({alert.rule_name} / {alert.source})[/dim]"
    )


def format_dashboard(
    dashboard: MonitoringDashboard, feeds: Sequence[FeedStatus] = ()
) -> None:
    """Print the monitoring dashboard to the console."""
    console.print()
    console.print(f"[bold]threatwatch v{__version__}[/bold] - Continuous Threat Monitoring")
    console.print()

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("key", style="dim")
    summary.add_column("value")
    summary.add_row("Active rules:", str(dashboard.active_rules))
    summary.add_row("Total alerts:", str(dashboard.total_alerts))
    summary.add_row("Critical alerts:", f"[bold red]{dashboard.critical_alerts}[/bold red]")
    summary.add_row("Unresolved alerts:", str(dashboard.unresolved_alerts))
    summary.add_row(
        "Healthy sources:", f"{dashboard.sources_healthy}/{dashboard.sources_total}"
    )
    summary.add_row("Last update:", _ts(dashboard.last_update))
    console.print(Panel(summary, title="Overview"))

    perf = Table(title="Rule Performance")
    perf.add_column("Rule", style="cyan")
    perf.add_column("24h", justify="right")
    perf.add_column("7d", justify="right")
    perf.add_column("False positive %", justify="right")
    for entry in dashboard.rule_performance:
        perf.add_row(
            entry.rule_name,
            str(entry.triggers_last_24h),
            str(entry.triggers_last_7d),
            f"{entry.false_positive_rate:.1f}",
        )
    console.print(perf)

    trends = Table(title="Threat Trends (7 days)")
    trends.add_column("Date", style="dim")
    trends.add_column("Critical", justify="right", style="bold red")
    trends.add_column("High", justify="right", style="red")
    trends.add_column("Medium", justify="right", style="yellow")
    trends.add_column("Low", justify="right", style="cyan")
    trends.add_column("Total", justify="right", style="bold")
    for day in dashboard.threat_trends:
        trends.add_row(
            day.date,
            str(day.critical),
            str(day.high),
            str(day.medium),
            str(day.low),
            str(day.total),
        )
    console.print(trends)

    if feeds:
        console.print(feeds_table(feeds))

    if dashboard.recent_alerts:
        console.print(alerts_table(dashboard.recent_alerts[:10], title="Recent Alerts"))


FEED_COLORS = {
    FeedState.ONLINE: "green",
    FeedState.DEGRADED: "yellow",
    FeedState.OFFLINE: "bold red",
    FeedState.UNKNOWN: "dim",
}


def feeds_table(feeds: Sequence[FeedStatus]) -> Table:
    table = Table(title="Feed Status")
    table.add_column("Feed", style="cyan")
    table.add_column("Status")
    table.add_column("Items", justify="right")
    table.add_column("Latency (ms)", justify="right")
    table.add_column("Last update", style="dim")
    table.add_column("Last error", style="dim")
    for feed in feeds:
        color = FEED_COLORS.get(feed.status, "white")
        table.add_row(
            feed.name,
            f"[{color}]{feed.status}[/{color}]",
            str(feed.items_received),
            f"{feed.latency_ms:.0f}" if feed.latency_ms is not None else "-",
            _ts(feed.last_update),
            feed.last_error or "",
        )
    return table
