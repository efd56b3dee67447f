"""User-facing presentation of errors."""

import traceback

from rich.markup import escape

from ...domain.exceptions import (
    ByteScopeError,
    ConfigurationError,
    RenderingError,
    RootDirectoryError,
)


class ErrorPresenter:
    """Turns exceptions into rich-markup messages with a hint."""

    HINTS = {
        RootDirectoryError: "Check that the directory exists and is readable, "
                            "or pass a different ROOT argument.",
        ConfigurationError: "Run 'bytescope config --show' to inspect the effective "
                            "configuration or 'bytescope config --init' for a fresh file.",
        RenderingError: "Check that the output directory is writable.",
    }

    @classmethod
    def present(cls, error: BaseException, verbose: bool = False) -> str:
        """
        Format an error for the console.

        Args:
            error: Exception to present
            verbose: Append the traceback

        Returns:
            Rich markup string
        """
        if isinstance(error, KeyboardInterrupt):
            return "[yellow]Operation cancelled by user[/yellow]"

        if isinstance(error, ByteScopeError):
            title = "Error"
        else:
            title = f"Unexpected error ({type(error).__name__})"

        lines = [f"[red]{title}:[/red] {escape(str(error))}"]

        for error_type, hint in cls.HINTS.items():
            if isinstance(error, error_type):
                lines.append(f"[dim]Hint: {hint}[/dim]")
                break

        if verbose:
            formatted = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
            lines.append(escape(formatted.rstrip()))

        return "\n".join(lines)
