"""CLI commands for framework and package detection."""

import json
from contextlib import nullcontext
from pathlib import Path

import typer
from rich.table import Table

from framescope.core.detector import detect, detect_many
from framescope.exceptions import FramescopeError, TargetError
from framescope.models.app import AppDetection, AppTarget
from framescope.models.detect import DetectionResult, Framework
from framescope.utils.output import console

app = typer.Typer(no_args_is_help=True)

BASE_ARCHIVE_NAME = "base.apk"


def resolve_target(path: Path) -> AppTarget:
    """Turn a batch argument into an application target.

    A file is a single-archive app. A directory holds one app's split
    archives: base.apk first (when present), then the other *.apk files
    sorted by name.

    Args:
        path: Archive file or split-archive directory.

    Returns:
        AppTarget named after the file stem or directory name.

    Raises:
        TargetError: If the path is missing or the directory has no archives.
    """
    if path.is_file():
        return AppTarget(package_name=path.stem, archive_paths=[path.resolve()])

    if not path.is_dir():
        raise TargetError(f"Target not found: {path}")

    archives = sorted(path.glob("*.apk"))
    if not archives:
        raise TargetError(f"No APK files found in {path}")

    archives.sort(key=lambda p: p.name != BASE_ARCHIVE_NAME)
    return AppTarget(
        package_name=path.resolve().name,
        archive_paths=[p.resolve() for p in archives],
    )


def _display_packages(result: DetectionResult | AppDetection) -> None:
    if not result.packages:
        console.print_warning("No packages detected.")
        return

    table = Table()
    table.add_column("Package", style="green")
    table.add_column("Version", style="cyan")
    for package in result.packages:
        table.add_row(package.name, package.version or "-")
    console.print(table)


@app.command("app")
def analyze_app(
    archive_paths: list[Path] = typer.Argument(
        ...,
        help="Base archive followed by split archives of one application.",
        dir_okay=False,
    ),
    framework: Framework = typer.Option(
        None,
        "--framework",
        "-f",
        help="Skip classification and extract packages for this framework.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON.",
    ),
) -> None:
    """Detect the UI framework and bundled packages of one application.

    Archives that cannot be read are skipped; an app with no readable
    archive is reported as Unknown.
    """
    console.set_json_mode(json_output)

    try:
        result = detect(archive_paths, framework)

        if json_output:
            typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
            return

        console.print(f"\n[bold]Framework:[/bold] [cyan]{result.framework}[/cyan]")
        if result.framework is not Framework.UNKNOWN:
            console.print(f"\n[bold]Packages ({len(result.packages)}):[/bold]")
            _display_packages(result)
        console.print()

    except FramescopeError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None


@app.command("batch")
def analyze_batch(
    targets: list[Path] = typer.Argument(
        ...,
        help="Archive files or directories of split archives, one per app.",
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Parallel workers (default: config value or CPU count).",
    ),
    timeout: float = typer.Option(
        None,
        "--timeout",
        "-t",
        min=0.001,
        help="Per-app time budget in seconds (default: config value or 60).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON.",
    ),
) -> None:
    """Detect frameworks and packages for many applications in parallel."""
    console.set_json_mode(json_output)

    try:
        app_targets = [resolve_target(path) for path in targets]

        status = (
            nullcontext()
            if json_output
            else console.status(f"Analyzing {len(app_targets)} app(s)...")
        )
        with status:
            detections = detect_many(app_targets, workers=workers, timeout=timeout)

        if json_output:
            payload = [detection.model_dump(mode="json") for detection in detections]
            typer.echo(json.dumps(payload, indent=2))
            return

        table = Table()
        table.add_column("Package Name", style="green")
        table.add_column("Framework", style="cyan")
        table.add_column("Packages", justify="right")
        for detection in detections:
            framework = str(detection.framework)
            if detection.timed_out:
                framework += " [yellow](timed out)[/yellow]"
            table.add_row(
                detection.package_name, framework, str(len(detection.packages))
            )
        console.print(table)

        for detection in detections:
            if detection.packages:
                console.print(f"\n[bold]{detection.package_name}[/bold]")
                _display_packages(detection)
        console.print()

    except FramescopeError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None
