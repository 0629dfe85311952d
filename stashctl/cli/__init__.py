"""Command-line interface for stashctl."""
