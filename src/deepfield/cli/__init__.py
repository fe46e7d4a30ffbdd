"""Command-line interface for Deepfield."""
