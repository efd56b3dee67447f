"""Console summary of the histogram using rich."""

from typing import List, Optional, Tuple, TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .base import HistogramRenderer, byte_label

if TYPE_CHECKING:
    from ...application.pipeline import PipelineResult


class ConsoleRenderer(HistogramRenderer):
    """Prints a summary panel and the most frequent byte values."""

    name = "console"

    def __init__(self, console: Optional[Console] = None, top_n: int = 16):
        self.console = console or Console()
        self.top_n = top_n

    def build_table(self, result: "PipelineResult") -> Table:
        histogram = result.histogram
        total = histogram.total

        table = Table(title=f"Top {self.top_n} byte values")
        table.add_column("Byte", justify="right", style="cyan")
        table.add_column("Char", justify="center")
        table.add_column("Count", justify="right")
        table.add_column("Share", justify="right", style="green")

        for byte_value, count in histogram.most_common(self.top_n):
            share = (count / total) * 100 if total else 0.0
            table.add_row(
                f"0x{byte_value:02x}",
                Text(byte_label(byte_value)),
                f"{count:,}",
                f"{share:.2f}%",
            )
        return table

    def render(self, result: "PipelineResult") -> List[Tuple[int, int]]:
        histogram = result.histogram

        self.console.print(Panel.fit(
            f"[bold green]Histogram Complete[/bold green]\n\n"
            f"Root: {escape(result.root)}\n"
            f"Files read: {result.files_processed}\n"
            f"Files skipped: {result.files_failed}\n"
            f"Directories skipped: {result.walk_stats.directories_skipped}\n"
            f"Total bytes: {histogram.total:,}\n"
            f"Distinct byte values: {histogram.distinct_values}\n"
            f"Duration: {result.duration_seconds:.2f}s",
            border_style="green"
        ))

        if histogram.total:
            self.console.print(self.build_table(result))
        else:
            self.console.print("[yellow]No bytes counted[/yellow]")

        return histogram.most_common(self.top_n)
