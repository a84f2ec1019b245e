# Copyright (c) Syntropy Systems
"""forecastview show command."""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from forecastview.cli.render import render_run
from forecastview.client import ForecastViewClientError, RunClient
from forecastview.config import load_config
from forecastview.runner import load_persisted
from forecastview.store import RunStore

console = Console()


def show(
    api_url: Optional[str] = typer.Option(
        None,
        "--api-url",
        help="Backend URL (overrides config and FORECASTVIEW_API_URL)",
    ),
    show_raw: bool = typer.Option(
        False,
        "--raw",
        help="Show the summary as JSON",
    ),
) -> None:
    """Show the results of the last run without starting a new one."""
    config = load_config()
    url = (api_url or config.api_url).rstrip("/")

    try:
        with RunClient(url, timeout=config.request_timeout) as client:
            result = load_persisted(client, RunStore())
    except ForecastViewClientError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    render_run(console, result, feature_limit=config.feature_limit, show_raw=show_raw)
