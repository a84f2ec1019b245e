# Copyright (c) Syntropy Systems
"""Main CLI entry point for forecastview."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from forecastview.cli.doctor import doctor
from forecastview.cli.init_cmd import init
from forecastview.cli.run_cmd import run
from forecastview.cli.show import show

app = typer.Typer(
    name="forecastview",
    help=(
        "Terminal viewer for forecasting runs. Trigger a run, reconcile its "
        "results, see the forecast."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show debug logging",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register commands
_ = app.command()(init)
_ = app.command()(run)
_ = app.command()(show)
_ = app.command()(doctor)


if __name__ == "__main__":
    app()
