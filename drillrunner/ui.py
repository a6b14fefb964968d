"""Coloured status lines for the terminal."""

from __future__ import annotations

import os

from rich.console import Console


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True, emoji=False)


def _no_emoji() -> bool:
    return "NO_EMOJI" in os.environ


def warn(message: str) -> None:
    """Print a red warning line, prefixed with a warning sign."""
    symbol = "!" if _no_emoji() else "⚠️ "
    _console().print(f"{symbol} {message}", style="red", markup=False)


def success(message: str) -> None:
    """Print a green success line, prefixed with a check mark."""
    symbol = "✓" if _no_emoji() else "✅"
    _console().print(f"{symbol} {message}", style="green", markup=False)