"""Configuration infrastructure."""

from .config_models import (
    ByteScopeConfig,
    LoggingConfig,
    OutputConfig,
    PipelineConfig,
    RenderingConfig,
)
from .config_loader import ConfigLoader

__all__ = [
    "ByteScopeConfig",
    "ConfigLoader",
    "LoggingConfig",
    "OutputConfig",
    "PipelineConfig",
    "RenderingConfig",
]
