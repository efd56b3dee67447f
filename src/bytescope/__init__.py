"""bytescope - concurrent byte-value histograms over directory trees."""

__version__ = "1.0.0"
