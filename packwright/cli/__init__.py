"""Packwright command-line interface."""

from .__main__ import cli, main

__all__ = ["cli", "main"]
