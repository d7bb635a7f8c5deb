"""Command-line interface for appwritectl."""

from appwritectl.cli.main import cli, main

__all__ = ["cli", "main"]
