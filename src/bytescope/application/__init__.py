"""Application layer: the histogram pipeline."""

from .pipeline import (
    PipelineCoordinator,
    PipelineResult,
    PipelineState,
    RenderOutcome,
    run_pipeline,
)

__all__ = [
    "PipelineCoordinator",
    "PipelineResult",
    "PipelineState",
    "RenderOutcome",
    "run_pipeline",
]
