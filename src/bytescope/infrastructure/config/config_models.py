"""Configuration data models using Pydantic."""

from typing import List, Optional, Tuple
from matplotlib.colors import is_color_like
from pydantic import BaseModel, Field, field_validator, ConfigDict


class PipelineConfig(BaseModel):
    """Collection pipeline configuration."""
    root_directory: str = Field(
        default="data",
        description="Directory tree to scan"
    )
    worker_count: int = Field(
        default=4,
        ge=1,
        le=256,
        description="Number of concurrent file histogram workers"
    )
    queue_capacity: int = Field(
        default=4,
        ge=1,
        le=100_000,
        description="Capacity of the bounded file path queue (backpressure bound)"
    )
    read_buffer_size: int = Field(
        default=64 * 1024,
        ge=1,
        le=64 * 1024 * 1024,
        description="Bytes read per call when streaming a file"
    )
    exclude: List[str] = Field(
        default_factory=list,
        description="Glob patterns for files/directories to skip"
    )


class RenderingConfig(BaseModel):
    """Chart and table rendering configuration."""
    chart_ranges: List[Tuple[int, int]] = Field(
        default_factory=lambda: [(0, 63), (64, 127)],
        description="Inclusive byte ranges, one bar chart per range"
    )
    chart_width_inches: float = Field(
        default=17.0,
        gt=0,
        le=100,
        description="Chart width in inches"
    )
    chart_height_inches: float = Field(
        default=5.0,
        gt=0,
        le=100,
        description="Chart height in inches"
    )
    bar_color: str = Field(
        default="tab:green",
        description="Matplotlib color for the bars"
    )
    file_prefix: str = Field(
        default="barchart",
        description="Prefix for chart image file names"
    )
    top_n: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Number of byte values listed in the console table"
    )

    @field_validator('chart_ranges')
    @classmethod
    def validate_chart_ranges(cls, v):
        """Ensure every range lies within 0-255 and is ordered."""
        if not v:
            raise ValueError("chart_ranges must contain at least one range")
        for start, end in v:
            if not 0 <= start <= end <= 255:
                raise ValueError(
                    f"invalid chart range ({start}, {end}): expected 0 <= start <= end <= 255"
                )
        return v

    @field_validator('bar_color')
    @classmethod
    def validate_bar_color(cls, v):
        """Ensure matplotlib understands the color."""
        if not is_color_like(v):
            raise ValueError(f"bar_color is not a matplotlib color: {v!r}")
        return v

    @field_validator('file_prefix')
    @classmethod
    def validate_file_prefix(cls, v):
        """Ensure prefix is a plain file name component."""
        if not v or "/" in v or "\\" in v:
            raise ValueError("file_prefix must be a non-empty file name without separators")
        return v


class OutputConfig(BaseModel):
    """Output configuration."""
    formats: List[str] = Field(
        default_factory=lambda: ["console", "png"],
        description="Renderers to run (console, png, json)"
    )
    output_directory: str = Field(
        default=".",
        description="Directory for chart images and exports"
    )

    @field_validator('formats')
    @classmethod
    def validate_formats(cls, v):
        """Ensure formats are valid."""
        valid_formats = ["console", "png", "json"]
        v = [fmt.lower() for fmt in v]
        for fmt in v:
            if fmt not in valid_formats:
                raise ValueError(f"format must be one of {valid_formats}")
        # Keep first occurrence order, drop duplicates
        return list(dict.fromkeys(v))


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    file: Optional[str] = Field(
        default=None,
        description="Log file path (no file logging when unset)"
    )
    console: bool = Field(
        default=True,
        description="Enable console logging"
    )
    rotation: str = Field(
        default="daily",
        description="Log rotation strategy (daily, none)"
    )
    retention_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Number of days to retain logs"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}")
        return v

    @field_validator('rotation')
    @classmethod
    def validate_rotation(cls, v):
        """Ensure rotation strategy is valid."""
        valid_strategies = ["daily", "none"]
        v = v.lower()
        if v not in valid_strategies:
            raise ValueError(f"rotation must be one of {valid_strategies}")
        return v


class ByteScopeConfig(BaseModel):
    """Complete bytescope configuration."""
    model_config = ConfigDict(
        extra="forbid",  # Forbid extra fields
        validate_assignment=True  # Validate on assignment
    )

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    rendering: RenderingConfig = Field(default_factory=RenderingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def to_yaml(self) -> str:
        """Convert configuration to YAML string."""
        import yaml
        return yaml.dump(self.model_dump(mode="json"), default_flow_style=False, sort_keys=False)
