"""Command-line interface for positionflow."""

from .commands import main

__all__ = ["main"]
