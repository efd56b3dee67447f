"""Command-line interface for bytescope."""
