# Copyright (c) Syntropy Systems
"""forecastview doctor command."""

import os
from typing import Optional

import typer
from rich.console import Console

from forecastview.client import ForecastViewClientError, RunClient
from forecastview.config import API_URL_ENV, find_config_file, load_config

console = Console()


def doctor(
    api_url: Optional[str] = typer.Option(
        None,
        "--api-url",
        help="Backend URL (overrides config and FORECASTVIEW_API_URL)",
    ),
) -> None:
    """Check forecastview setup and diagnose issues.

    Verifies:
    - which config file is used
    - the backend answers
    - summary.json of the last run can be read
    """
    issues: list[str] = []
    warnings: list[str] = []

    config_path = find_config_file()
    if config_path is not None and config_path.exists():
        console.print(f"[green]✓[/green] Config: {config_path}")
    else:
        console.print("[dim]•[/dim] No config file, using defaults")
        console.print("  Run [bold]forecastview init[/bold] to create one")

    config = load_config()
    url = (api_url or config.api_url).rstrip("/")
    if os.environ.get(API_URL_ENV) and api_url is None:
        console.print(f"[dim]•[/dim] {API_URL_ENV}={os.environ[API_URL_ENV]}")
    console.print(f"[dim]•[/dim] Backend: {url}")

    with RunClient(url, timeout=config.request_timeout or 10.0) as client:
        if client.ping():
            console.print("[green]✓[/green] Backend reachable")
            try:
                summary = client.fetch_summary()
            except ForecastViewClientError as e:
                console.print(f"[yellow]⚠[/yellow] summary.json unavailable: {e}")
                warnings.append("No summary.json yet")
            else:
                console.print(f"[green]✓[/green] summary.json: {len(summary)} fields")
        else:
            console.print(f"[red]✗[/red] Backend not reachable at {url}")
            issues.append("Backend not reachable")

    # Summary
    console.print()
    if issues:
        console.print(f"[red]Found {len(issues)} issue(s)[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
        raise typer.Exit(1)
    if warnings:
        console.print(f"[yellow]Found {len(warnings)} warning(s)[/yellow]")
        for warning in warnings:
            console.print(f"  - {warning}")
    else:
        console.print("[green]All checks passed[/green]")
