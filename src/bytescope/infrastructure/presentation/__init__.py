"""Presentation helpers for the CLI."""

from .error_presenter import ErrorPresenter

__all__ = ["ErrorPresenter"]
