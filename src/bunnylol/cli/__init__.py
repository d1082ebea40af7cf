"""Command-line interface for bunnylol."""
