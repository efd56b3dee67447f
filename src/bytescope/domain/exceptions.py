"""Domain exceptions for bytescope."""

from typing import Optional


class ByteScopeError(Exception):
    """Base class for all bytescope errors."""


class ConfigurationError(ByteScopeError):
    """Configuration could not be loaded or failed validation."""


class RootDirectoryError(ByteScopeError):
    """
    The discovery root is missing or cannot be listed.

    This is the only error that aborts a whole run; it is raised
    before any worker is started.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot scan root directory {path}: {reason}")


class PipelineStateError(ByteScopeError):
    """An illegal pipeline state transition was attempted."""


class QueueClosedError(ByteScopeError):
    """Raised when putting an item onto a queue that has been closed."""


class RenderingError(ByteScopeError):
    """A renderer failed to produce its output."""

    def __init__(self, message: str, renderer: Optional[str] = None):
        self.renderer = renderer
        super().__init__(message)
