"""Root CLI application for framescope."""

import typer

from framescope import __version__
from framescope.cli import analyze
from framescope.utils.config import get_log_level
from framescope.utils.logging import setup_logging

app = typer.Typer(
    name="framescope",
    help="Detect the UI framework and bundled packages of Android apps.",
    no_args_is_help=True,
)

# Register subcommands
app.add_typer(analyze.app, name="analyze", help="Static framework and package detection")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"framescope {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable debug logging.",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Log level (default: config value or WARNING).",
    ),
) -> None:
    """framescope - static framework and package detection."""
    setup_logging("DEBUG" if verbose else get_log_level(log_level))


if __name__ == "__main__":
    app()
