"""Command-line interface for pitch-scorer."""

from .main import cli, main

__all__ = ["cli", "main"]
