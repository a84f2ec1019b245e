# Copyright (c) Syntropy Systems
"""forecastview run command."""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from forecastview.cli.render import render_run
from forecastview.client import ForecastViewClientError, RunClient
from forecastview.config import load_config
from forecastview.runner import execute_run
from forecastview.store import RunStore

console = Console()


def run(
    fast: Optional[bool] = typer.Option(
        None,
        "--fast/--full",
        help="Fast mode skips hyperparameter search (default from config)",
    ),
    api_url: Optional[str] = typer.Option(
        None,
        "--api-url",
        help="Backend URL (overrides config and FORECASTVIEW_API_URL)",
    ),
    show_log: bool = typer.Option(
        False,
        "--log",
        help="Show the backend log tail",
    ),
    show_raw: bool = typer.Option(
        False,
        "--raw",
        help="Show the reconciled summary as JSON",
    ),
) -> None:
    """Run the forecast and show its results.

    Triggers the backend job, merges its response with the persisted
    summary.json and prints figures, KPIs and feature importance.
    """
    config = load_config()
    url = (api_url or config.api_url).rstrip("/")
    fast_mode = config.fast_mode if fast is None else fast
    mode = "fast" if fast_mode else "full"

    store = RunStore()
    try:
        with RunClient(url, timeout=config.request_timeout) as client, console.status(
            f"Running forecast ({mode} mode) on {url}..."
        ):
            result = execute_run(client, store, fast_mode=fast_mode)
    except ForecastViewClientError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]Run finished[/green] [dim]({mode} mode, nonce {result.nonce})[/dim]")
    render_run(
        console,
        result,
        feature_limit=config.feature_limit,
        show_log=show_log,
        show_raw=show_raw,
    )

    if not result.ok:
        console.print("\n[red]Backend reported a failed run.[/red] Use --log to see the log tail.")
        raise typer.Exit(1)
