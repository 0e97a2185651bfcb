"""Command-line interface for smallbooks."""
