"""Domain layer: histogram model and exceptions."""
