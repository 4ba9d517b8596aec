"""Top-level CLI commands."""
