# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

from typing import Annotated

import typer

from threatwatch.cli.commands import monitor, notify, rules

app = typer.Typer(
    name="threatwatch",
    help="Continuous OSINT threat monitoring and alerting",
    no_args_is_help=True,
)

app.add_typer(rules.app, name="rules", help="Inspect and validate monitoring rules")
app.add_typer(notify.app, name="notify", help="Manage and test notification channels")

app.command(name="cycle")(monitor.cycle)
app.command(name="dashboard")(monitor.dashboard)
app.command(name="watch")(monitor.watch)


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
    no_scheduler: Annotated[
        bool, typer.Option("--no-scheduler", help="Disable the background monitoring loop")
    ] = False,
) -> None:
    """Start the threatwatch API server."""
    import os

    import uvicorn

    from threatwatch.core.config import get_settings

    settings = get_settings()
    if no_scheduler:
        # Pass flag via environment; the app factory reads it
        os.environ["THREATWATCH_NO_SCHEDULER"] = "1"

    # Rules and alerts live in process memory, so a single worker.
    uvicorn.run(
        "threatwatch.api.app:create_app_from_env",
        host=host or settings.api_host,
        port=port or settings.api_port,
        factory=True,
    )


@app.command()
def version() -> None:
    """Print the threatwatch version."""
    from threatwatch import __version__

    typer.echo(f"threatwatch {__version__}")
