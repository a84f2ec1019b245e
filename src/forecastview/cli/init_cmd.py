# Copyright (c) Syntropy Systems
"""forecastview init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from forecastview.config import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_API_URL,
    ForecastViewConfig,
)

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
    api_url: str = typer.Option(
        DEFAULT_API_URL,
        "--api-url",
        help="Backend URL to store in the config",
    ),
) -> None:
    """Initialize a forecastview project.

    Creates a .forecastview directory with a default config.yaml.
    """
    target = path.resolve()
    config_dir = target / CONFIG_DIR_NAME

    if config_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {config_dir}")
        return

    config_dir.mkdir(parents=True)

    config = ForecastViewConfig(api_url=api_url.rstrip("/"))
    config_path = config_dir / CONFIG_FILE_NAME
    with config_path.open("w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False)

    console.print(f"[green]Initialized forecastview project:[/green] {config_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
    console.print(f"  [dim]api_url:[/dim] {config.api_url}")
