"""CLI commands for statusboard."""
