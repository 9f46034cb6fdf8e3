"""
Packwright CLI — styled output helpers built on Click.

All output degrades gracefully on non-colour terminals (click.style
handles NO_COLOR / TERM=dumb).
"""

from __future__ import annotations

import click

_CHECK = "✓"
_CROSS = "✗"


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red."""
    click.echo(click.style(message, fg="red"), err=True)


def warning(message: str) -> None:
    """Print warning message in yellow."""
    click.echo(click.style(message, fg="yellow"), err=True)


def kv(key: str, value: str, *, key_width: int = 14) -> None:
    """Aligned key/value line."""
    click.echo(f"  {click.style(key.ljust(key_width), fg='cyan')} {value}")


def bullet(text: str, *, indent: int = 2, fg: str = "white") -> None:
    click.echo(f"{' ' * indent}{click.style('•', fg=fg)} {text}")
