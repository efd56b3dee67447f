"""CLI command implementations."""

from pathlib import Path
from typing import Any, Dict, List, Optional
import threading

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from ... import __version__
from ...application.pipeline import PipelineResult
from ...domain.exceptions import ByteScopeError
from ...infrastructure.config.config_loader import ConfigLoader
from ...infrastructure.di.container import DIContainer
from ...infrastructure.presentation.error_presenter import ErrorPresenter

# Seconds between progress display refreshes while the pipeline runs
PROGRESS_POLL_INTERVAL = 0.25


def build_overrides(
    root: Optional[str] = None,
    workers: Optional[int] = None,
    queue_capacity: Optional[int] = None,
    output_dir: Optional[Path] = None,
    formats: Optional[List[str]] = None,
    exclude: Optional[List[str]] = None,
    verbose: bool = False,
) -> Dict[str, Dict[str, Any]]:
    """Translate CLI flags into configuration overrides (unset flags are skipped)."""
    overrides: Dict[str, Dict[str, Any]] = {}

    pipeline: Dict[str, Any] = {}
    if root is not None:
        pipeline["root_directory"] = root
    if workers is not None:
        pipeline["worker_count"] = workers
    if queue_capacity is not None:
        pipeline["queue_capacity"] = queue_capacity
    if exclude:
        pipeline["exclude"] = list(exclude)
    if pipeline:
        overrides["pipeline"] = pipeline

    output: Dict[str, Any] = {}
    if output_dir is not None:
        output["output_directory"] = str(output_dir)
    if formats:
        output["formats"] = list(formats)
    if output:
        overrides["output"] = output

    if verbose:
        overrides["logging"] = {"level": "DEBUG"}

    return overrides


def scan_command(
    root: Optional[str],
    workers: Optional[int],
    queue_capacity: Optional[int],
    output_dir: Optional[Path],
    formats: Optional[List[str]],
    exclude: Optional[List[str]],
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """
    Execute scan command.

    Args:
        root: Directory to scan
        workers: Worker pool size
        queue_capacity: Path queue capacity
        output_dir: Directory for charts and exports
        formats: Output formats
        exclude: Exclusion patterns
        config_path: Config file path
        verbose: Verbose output
        console: Rich console
    """
    console.print(Panel.fit(
        "[bold]bytescope Byte Histogram[/bold]",
        border_style="blue"
    ))

    overrides = build_overrides(
        root=root,
        workers=workers,
        queue_capacity=queue_capacity,
        output_dir=output_dir,
        formats=formats,
        exclude=exclude,
        verbose=verbose,
    )

    try:
        container = DIContainer.create(config_path, overrides=overrides, console=console)
    except (ByteScopeError, ValueError) as e:
        console.print(f"\n{ErrorPresenter.present(e, verbose=verbose)}")
        raise SystemExit(1)

    pipeline_config = container.config.pipeline
    console.print(
        f"[cyan]Scanning {escape(pipeline_config.root_directory)} "
        f"(workers: {pipeline_config.worker_count}, "
        f"queue capacity: {pipeline_config.queue_capacity})[/cyan]"
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Collecting byte histogram...", total=None)

        try:
            result = _run_with_progress(container, progress, task)
        except KeyboardInterrupt:
            progress.update(task, description="[yellow]Scan cancelled")
            console.print(f"\n{ErrorPresenter.present(KeyboardInterrupt(), verbose=verbose)}")
            raise SystemExit(130)
        except Exception as e:
            progress.update(task, description="[red]Scan failed!")
            console.print(f"\n{ErrorPresenter.present(e, verbose=verbose)}")
            raise SystemExit(1)

    outcome = container.coordinator.render(result, container.renderers)
    container.progress.on_scan_complete()

    for name, output in outcome.outputs.items():
        if name == "png":
            for path in output:
                console.print(f"[green]Chart saved to {escape(str(path))}[/green]")
        elif name == "json":
            console.print(f"[green]Histogram saved to {escape(str(output))}[/green]")

    if not outcome.success:
        for name, error in outcome.errors.items():
            console.print(f"[red]Renderer '{name}' failed:[/red] {escape(error)}")
        raise SystemExit(1)


def _run_with_progress(container: DIContainer, progress: Progress, task) -> PipelineResult:
    """
    Run the pipeline on a helper thread and refresh the display meanwhile.

    Returns:
        Pipeline result

    Raises:
        Whatever the pipeline raised
    """
    outcome: Dict[str, Any] = {}

    def target():
        try:
            outcome["result"] = container.coordinator.run()
        except BaseException as e:
            outcome["error"] = e

    runner = threading.Thread(target=target, name="bytescope-pipeline", daemon=True)
    runner.start()

    while runner.is_alive():
        runner.join(PROGRESS_POLL_INTERVAL)
        snapshot = container.progress.snapshot()
        current = Path(snapshot.current_file).name if snapshot.current_file else ""
        progress.update(
            task,
            description=f"[cyan]Files: {snapshot.files_completed}/{snapshot.files_discovered} "
                        f"({snapshot.bytes_read:,} bytes) {escape(current[:30])}"
        )

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


def info_command(config_path: Optional[str], console: Console):
    """
    Execute info command.

    Args:
        config_path: Config file path
        console: Rich console
    """
    console.print(Panel.fit(
        "[bold]bytescope System Information[/bold]",
        border_style="blue"
    ))

    try:
        config = ConfigLoader.load(config_path)
    except ByteScopeError as e:
        console.print(f"\n{ErrorPresenter.present(e)}")
        raise SystemExit(1)

    console.print("\n[bold]Version:[/bold]")
    console.print(f"  bytescope: {__version__}")

    console.print("\n[bold]Pipeline:[/bold]")
    console.print(f"  Root directory: {escape(config.pipeline.root_directory)}")
    console.print(f"  Workers: {config.pipeline.worker_count}")
    console.print(f"  Queue capacity: {config.pipeline.queue_capacity}")
    console.print(f"  Read buffer: {config.pipeline.read_buffer_size} bytes")
    if config.pipeline.exclude:
        console.print(f"  Exclusions: {escape(', '.join(config.pipeline.exclude))}")

    console.print("\n[bold]Output:[/bold]")
    console.print(f"  Formats: {', '.join(config.output.formats)}")
    console.print(f"  Directory: {escape(config.output.output_directory)}")
    ranges = ", ".join(f"{start}-{end}" for start, end in config.rendering.chart_ranges)
    console.print(f"  Chart ranges: {ranges}")

    console.print("\n[bold]Configuration:[/bold]")
    config_info = ConfigLoader.get_config_info()
    if config_path:
        console.print(f"  Explicit config: {escape(config_path)}")
    elif config_info["existing_configs"]:
        console.print("  Active configs:")
        for cfg in config_info["existing_configs"]:
            console.print(f"    - {escape(cfg)}")
    else:
        console.print("  Using default configuration")


def config_command(
    init: bool,
    path: Optional[str],
    show: bool,
    console: Console,
):
    """
    Execute config command.

    Args:
        init: Create default config
        path: Config file path
        show: Show current config
        console: Rich console
    """
    console.print(Panel.fit(
        "[bold]bytescope Configuration[/bold]",
        border_style="blue"
    ))

    if init:
        try:
            config_path = ConfigLoader.create_default_config(path)
        except ByteScopeError as e:
            console.print(f"\n{ErrorPresenter.present(e)}")
            raise SystemExit(1)
        console.print(f"\n[green]Configuration file created: {escape(str(config_path))}[/green]")

    elif show:
        try:
            config = ConfigLoader.load(path)
        except ByteScopeError as e:
            console.print(f"\n{ErrorPresenter.present(e)}")
            raise SystemExit(1)
        console.print("\n[bold]Current Configuration:[/bold]")
        console.print(escape(config.to_yaml()))

    else:
        config_info = ConfigLoader.get_config_info()

        console.print("\n[bold]Configuration Files:[/bold]")
        if config_info["existing_configs"]:
            for cfg in config_info["existing_configs"]:
                console.print(f"  [green]{escape(cfg)}[/green]")
        else:
            console.print("  No configuration files found")

        console.print("\n[bold]Environment Overrides:[/bold]")
        if config_info["env_overrides"]:
            for env_var in config_info["env_overrides"]:
                console.print(f"  {escape(env_var)}")
        else:
            console.print("  None")

        console.print("\n[bold]Default Locations:[/bold]")
        for default_path in config_info["default_paths"]:
            console.print(f"  {escape(default_path)}")
