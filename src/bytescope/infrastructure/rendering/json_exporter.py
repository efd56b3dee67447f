"""JSON export of the total histogram."""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, TYPE_CHECKING
import json

from ...domain.exceptions import RenderingError
from ..logging import ByteScopeLogger
from .base import HistogramRenderer

if TYPE_CHECKING:
    from ...application.pipeline import PipelineResult


class JSONExporter(HistogramRenderer):
    """Writes the 256 counters and run statistics to a JSON file."""

    name = "json"

    def __init__(self, output_directory: Path, file_name: str = "histogram.json"):
        self.output_file = Path(output_directory) / file_name
        self.logger = ByteScopeLogger.get_instance()

    def build_document(self, result: "PipelineResult") -> Dict[str, Any]:
        walk = result.walk_stats
        return {
            "root": result.root,
            "generated_at": datetime.now().isoformat(),
            **result.histogram.to_dict(),
            "stats": {
                "files_discovered": walk.files_discovered,
                "files_processed": result.files_processed,
                "files_failed": result.files_failed,
                "files_truncated": result.worker_stats.get("files_truncated", 0),
                "directories_visited": walk.directories_visited,
                "directories_skipped": walk.directories_skipped,
                "workers": result.worker_stats.get("workers", 0),
                "duration_seconds": round(result.duration_seconds, 3),
            },
        }

    def render(self, result: "PipelineResult") -> Path:
        document = self.build_document(result)
        try:
            self.output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_file, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
        except OSError as e:
            raise RenderingError(
                f"cannot write {self.output_file}: {e}", renderer=self.name
            ) from e

        self.logger.info("Histogram exported", extra={"file": str(self.output_file)})
        return self.output_file
