"""Shared Rich console instance for CLI output.

Diagnostics go to stderr so resolved YAML on stdout stays machine-readable.
"""

from rich.console import Console

console = Console(stderr=True)

__all__ = ["console"]
