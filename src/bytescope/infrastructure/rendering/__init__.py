"""Rendering collaborators consuming the total histogram."""

from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console

from ..config.config_models import RenderingConfig
from .base import HistogramRenderer, byte_label
from .bar_chart import BarChartRenderer, render_bar_charts
from .console import ConsoleRenderer
from .json_exporter import JSONExporter


def create_renderers(
    formats: Sequence[str],
    config: RenderingConfig,
    output_directory: str,
    console: Optional[Console] = None,
) -> List[HistogramRenderer]:
    """
    Build renderers for the requested output formats.

    Args:
        formats: Any of "console", "png", "json"
        config: Rendering configuration
        output_directory: Directory for files produced by renderers
        console: Rich console for the console renderer

    Returns:
        Renderers in the order the formats were given
    """
    renderers: List[HistogramRenderer] = []
    for fmt in formats:
        if fmt == "console":
            renderers.append(ConsoleRenderer(console=console, top_n=config.top_n))
        elif fmt == "png":
            renderers.append(BarChartRenderer(
                output_directory=Path(output_directory),
                ranges=config.chart_ranges,
                file_prefix=config.file_prefix,
                width_inches=config.chart_width_inches,
                height_inches=config.chart_height_inches,
                bar_color=config.bar_color,
            ))
        elif fmt == "json":
            renderers.append(JSONExporter(output_directory=Path(output_directory)))
        else:
            raise ValueError(f"Unknown output format: {fmt}")
    return renderers


__all__ = [
    "BarChartRenderer",
    "ConsoleRenderer",
    "HistogramRenderer",
    "JSONExporter",
    "byte_label",
    "create_renderers",
    "render_bar_charts",
]
