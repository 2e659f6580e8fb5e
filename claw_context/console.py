"""Shared Rich consoles for CLI output.

The context document is written to stdout untouched; everything meant for
the person at the terminal (reports, prompts, confirmations) goes to stderr
so piping the document stays clean.
"""

from rich.console import Console

console = Console(stderr=True)

__all__ = ["console"]
