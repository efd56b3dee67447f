"""Base class and helpers shared by histogram renderers."""

from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from ...application.pipeline import PipelineResult

_ESCAPES = {
    0x07: "\\a",
    0x08: "\\b",
    0x09: "\\t",
    0x0A: "\\n",
    0x0B: "\\v",
    0x0C: "\\f",
    0x0D: "\\r",
    0x22: '\\"',
    0x5C: "\\\\",
}


def byte_label(byte_value: int) -> str:
    """
    ASCII-safe label for a byte value.

    Printable ASCII is shown as itself, common control characters as
    their escape sequence and everything else as ``\\xNN``.
    """
    if not 0 <= byte_value <= 255:
        raise ValueError(f"byte value out of range: {byte_value}")
    if byte_value in _ESCAPES:
        return _ESCAPES[byte_value]
    if 0x20 <= byte_value < 0x7F:
        return chr(byte_value)
    return f"\\x{byte_value:02x}"


class HistogramRenderer(ABC):
    """Consumes a finished pipeline result and produces some output."""

    name: str = "renderer"

    @abstractmethod
    def render(self, result: "PipelineResult") -> Any:
        """
        Render the total histogram.

        Args:
            result: Pipeline result holding the merged histogram

        Returns:
            Renderer specific output (written paths, rows, ...)

        Raises:
            RenderingError: If the output could not be produced
        """
