"""Infrastructure layer: concurrency, discovery, configuration and output."""
