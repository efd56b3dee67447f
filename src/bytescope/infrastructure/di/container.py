"""Dependency injection container for bytescope."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from rich.console import Console

from ..config.config_loader import ConfigLoader
from ..config.config_models import ByteScopeConfig
from ..logging import ByteScopeLogger
from ..progress import ProgressTracker
from ..rendering import HistogramRenderer, create_renderers
from ...application.pipeline import PipelineCoordinator


@dataclass
class DIContainer:
    """
    Dependency injection container for bytescope.

    Assembles all components for one run. The pipeline configuration
    is handed to the coordinator explicitly; nothing is kept in
    module-level state.
    """

    # Configuration
    config: ByteScopeConfig

    # Infrastructure
    logger: ByteScopeLogger
    progress: ProgressTracker
    renderers: List[HistogramRenderer]

    # Application
    coordinator: PipelineCoordinator

    @classmethod
    def create(
        cls,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None,
        console: Optional[Console] = None,
    ) -> "DIContainer":
        """
        Create and wire all dependencies.

        Args:
            config_path: Optional path to configuration file
            overrides: Optional section -> {key: value} overrides (CLI flags)
            console: Rich console used for rendering and logging

        Returns:
            DIContainer with all dependencies wired
        """
        config = ConfigLoader.load(config_path, overrides=overrides)

        logger = ByteScopeLogger.get_instance()
        logger.configure(
            level=config.logging.level,
            console=config.logging.console,
            log_file=config.logging.file,
            rotation=config.logging.rotation,
            retention_days=config.logging.retention_days,
        )

        progress = ProgressTracker()
        coordinator = PipelineCoordinator(config.pipeline, progress=progress)

        renderers = create_renderers(
            formats=config.output.formats,
            config=config.rendering,
            output_directory=config.output.output_directory,
            console=console,
        )

        return cls(
            config=config,
            logger=logger,
            progress=progress,
            renderers=renderers,
            coordinator=coordinator,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<DIContainer: root={self.config.pipeline.root_directory} "
            f"workers={self.config.pipeline.worker_count} "
            f"renderers={[r.name for r in self.renderers]}>"
        )
