"""Reusable widgets for the archdemo TUI."""
