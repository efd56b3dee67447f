"""
bytescope CLI entry point.

Counts how often each byte value occurs across every file under a
directory tree and renders the resulting histogram.
"""

from pathlib import Path
from typing import List, Optional
import sys

import typer
from rich.console import Console

from .commands import config_command, info_command, scan_command

app = typer.Typer(
    name="bytescope",
    help="bytescope - concurrent byte-value histograms over directory trees",
    no_args_is_help=True,
)


@app.command(name="scan", help="Scan a directory tree and render its byte histogram")
def scan(
    root: Optional[str] = typer.Argument(
        None, help="Directory to scan (default: pipeline.root_directory from config)"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Number of file-reading workers"
    ),
    queue_capacity: Optional[int] = typer.Option(
        None, "--queue-capacity", "-q", min=1, help="Capacity of the bounded path queue"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Directory for charts and exports"
    ),
    formats: Optional[List[str]] = typer.Option(
        None, "--format", "-f", help="Output format: console, png or json (repeatable)"
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="Glob pattern of entries to skip (repeatable)"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to a configuration file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Debug logging and full tracebacks"
    ),
) -> None:
    scan_command(
        root=root,
        workers=workers,
        queue_capacity=queue_capacity,
        output_dir=output_dir,
        formats=formats,
        exclude=exclude,
        config_path=config,
        verbose=verbose,
        console=Console(),
    )


@app.command(name="config", help="Manage configuration files")
def config(
    init: bool = typer.Option(False, "--init", help="Create a default configuration file"),
    show: bool = typer.Option(False, "--show", help="Show the effective configuration"),
    path: Optional[str] = typer.Option(None, "--path", help="Configuration file path"),
) -> None:
    config_command(init=init, path=path, show=show, console=Console())


@app.command(name="info", help="Show version and effective settings")
def info(
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to a configuration file"
    ),
) -> None:
    info_command(config_path=config, console=Console())


def main() -> None:
    """Main entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
