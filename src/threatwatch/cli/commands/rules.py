# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CLI commands for inspecting and validating monitoring rules."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

app = typer.Typer(help="Inspect and validate monitoring rules")


@app.command(name="list")
def list_rules(
    as_json: Annotated[bool, typer.Option("--json", help="Print rules as JSON")] = False,
) -> None:
    """List the rules the engine would load with the current configuration."""
    from threatwatch.cli.commands.monitor import build_service
    from threatwatch.cli.formatters.console import console, rules_table

    rules = build_service().list_rules()
    if as_json:
        typer.echo(json.dumps([r.model_dump(mode="json") for r in rules], indent=2))
        return
    if not rules:
        console.print("[yellow]No monitoring rules configured.[/yellow]")
        return
    console.print(rules_table(rules))


@app.command()
def validate(
    path: Annotated[Path, typer.Argument(help="YAML rules file to validate")],
) -> None:
    """Check that a rules file parses and every pattern compiles."""
    from threatwatch.cli.formatters.console import console
    from threatwatch.core.exceptions import PatternError, RuleLoadError
    from threatwatch.models.rule import MonitoringRule
    from threatwatch.monitoring.loader import load_rules_file
    from threatwatch.monitoring.matcher import compile_rule_pattern

    try:
        entries = load_rules_file(path)
    except RuleLoadError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    failures = 0
    for index, (rule_id, draft) in enumerate(entries):
        rule = MonitoringRule(**draft.model_dump(), id=rule_id or f"#{index}")
        try:
            compile_rule_pattern(rule)
        except PatternError as exc:
            failures += 1
            console.print(f"[red]FAIL[/red] {rule.id} {rule.name}: {exc.reason}")
        else:
            console.print(f"[green]OK[/green]   {rule.id} {rule.name}")

    console.print(f"{len(entries)} rule(s), {failures} invalid pattern(s)")
    if failures:
        raise typer.Exit(1)
