"""Command-line interface for unplan."""
