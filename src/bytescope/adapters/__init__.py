"""Adapters connecting bytescope to the outside world."""
