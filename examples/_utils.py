"""Shared helpers for the runnable examples."""

from __future__ import annotations

import sys
import textwrap


def python_argv(script: str, *args: str) -> list[str]:
    """Return an argv running *script* with the current interpreter."""
    return [sys.executable, "-c", textwrap.dedent(script), *args]
