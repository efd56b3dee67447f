"""Logging infrastructure."""

from .logger import ByteScopeLogger, LOGGER_NAME

__all__ = ["ByteScopeLogger", "LOGGER_NAME"]
