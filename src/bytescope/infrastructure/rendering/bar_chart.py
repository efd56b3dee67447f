"""Bar chart images of byte ranges, rendered with matplotlib."""

from pathlib import Path
from typing import List, Sequence, Tuple, TYPE_CHECKING

from matplotlib.figure import Figure

from ...domain.exceptions import RenderingError
from ..logging import ByteScopeLogger
from .base import HistogramRenderer, byte_label

if TYPE_CHECKING:
    from ...application.pipeline import PipelineResult

DEFAULT_RANGES: List[Tuple[int, int]] = [(0, 63), (64, 127)]


def render_bar_charts(
    counts: Sequence[int],
    output_directory: Path,
    ranges: Sequence[Tuple[int, int]] = DEFAULT_RANGES,
    file_prefix: str = "barchart",
    width_inches: float = 17.0,
    height_inches: float = 5.0,
    bar_color: str = "tab:green",
    dpi: int = 100,
) -> List[Path]:
    """
    Save one bar chart PNG per inclusive byte range.

    Args:
        counts: 256 counters indexed by byte value
        output_directory: Directory for the images
        ranges: Inclusive (start, end) byte ranges
        file_prefix: Image names are ``{file_prefix}_{i}.png``
        width_inches: Figure width
        height_inches: Figure height
        bar_color: Matplotlib color for the bars
        dpi: Image resolution

    Returns:
        Paths of the written images, in range order

    Raises:
        RenderingError: If the counts are malformed or an image cannot be saved
    """
    if len(counts) != 256:
        raise RenderingError(f"expected 256 counters, got {len(counts)}", renderer="png")

    try:
        output_directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RenderingError(
            f"cannot create output directory {output_directory}: {e}", renderer="png"
        ) from e
    written: List[Path] = []

    for index, (start, end) in enumerate(ranges):
        values = [float(counts[b]) for b in range(start, end + 1)]
        labels = [byte_label(b) for b in range(start, end + 1)]
        positions = list(range(len(values)))

        try:
            fig = Figure(figsize=(width_inches, height_inches))
            ax = fig.add_subplot()
            ax.bar(positions, values, width=0.8, color=bar_color, linewidth=0)
            ax.set_title(f"{start} - {end} ascii chars distribution")
            ax.set_xticks(positions)
            ax.set_xticklabels(labels)
            ax.set_xlim(-0.5, len(values) - 0.5)
            fig.tight_layout()
        except ValueError as e:
            raise RenderingError(
                f"cannot draw chart for bytes {start}-{end}: {e}", renderer="png"
            ) from e

        path = output_directory / f"{file_prefix}_{index}.png"
        try:
            fig.savefig(path, dpi=dpi)
        except (OSError, ValueError) as e:
            raise RenderingError(f"cannot save png file {path}: {e}", renderer="png") from e
        written.append(path)

    return written


class BarChartRenderer(HistogramRenderer):
    """Writes bar chart images for the configured byte ranges."""

    name = "png"

    def __init__(
        self,
        output_directory: Path,
        ranges: Sequence[Tuple[int, int]] = DEFAULT_RANGES,
        file_prefix: str = "barchart",
        width_inches: float = 17.0,
        height_inches: float = 5.0,
        bar_color: str = "tab:green",
    ):
        self.output_directory = Path(output_directory)
        self.ranges = list(ranges)
        self.file_prefix = file_prefix
        self.width_inches = width_inches
        self.height_inches = height_inches
        self.bar_color = bar_color
        self.logger = ByteScopeLogger.get_instance()

    def render(self, result: "PipelineResult") -> List[Path]:
        paths = render_bar_charts(
            result.histogram.as_array(),
            self.output_directory,
            ranges=self.ranges,
            file_prefix=self.file_prefix,
            width_inches=self.width_inches,
            height_inches=self.height_inches,
            bar_color=self.bar_color,
        )
        self.logger.info(
            "Bar charts saved",
            extra={"files": ", ".join(str(p) for p in paths)}
        )
        return paths
