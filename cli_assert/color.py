"""Colour configuration for rendered diffs.

Resolution order: an explicit ``color=`` argument, then the session override
installed by the pytest plug-in, then ``CLI_ASSERT_COLOR``, then ``NO_COLOR``
and finally whether stderr is a terminal.
"""

from __future__ import annotations

import enum
import os
import sys
import typing as t

COLOR_ENV: t.Final[str] = "CLI_ASSERT_COLOR"
NO_COLOR_ENV: t.Final[str] = "NO_COLOR"


class ColorChoice(enum.StrEnum):
    """Accepted values for ``CLI_ASSERT_COLOR`` and ``--cli-assert-color``."""

    ALWAYS = "always"
    NEVER = "never"
    AUTO = "auto"


_override: ColorChoice | None = None


def _normalise(value: str) -> str:
    """Return a lowercase version of *value* suitable for lookups."""
    return value.strip().lower()


def parse_choice(value: str | ColorChoice) -> ColorChoice:
    """Convert *value* into a :class:`ColorChoice`."""
    try:
        return ColorChoice(_normalise(value))
    except ValueError:
        choices = ", ".join(choice.value for choice in ColorChoice)
        msg = f"invalid colour choice {value!r}; expected one of: {choices}"
        raise ValueError(msg) from None


def set_override(choice: str | ColorChoice | None) -> None:
    """Install (or clear with ``None``) a process-wide colour choice."""
    global _override
    _override = None if choice is None else parse_choice(choice)


def get_override() -> ColorChoice | None:
    """Return the active process-wide colour choice, if any."""
    return _override


def current_choice() -> ColorChoice:
    """Return the effective colour choice ignoring terminal detection."""
    if _override is not None:
        return _override

    if raw := os.getenv(COLOR_ENV):
        return parse_choice(raw)

    return ColorChoice.AUTO


def color_enabled(stream: t.TextIO | None = None) -> bool:
    """Return ``True`` when diffs should carry ANSI colour codes."""
    choice = current_choice()
    if choice is ColorChoice.ALWAYS:
        return True
    if choice is ColorChoice.NEVER:
        return False

    if os.getenv(NO_COLOR_ENV):
        return False

    target = stream if stream is not None else sys.stderr
    isatty = getattr(target, "isatty", None)
    return bool(isatty and isatty())


__all__ = [
    "COLOR_ENV",
    "NO_COLOR_ENV",
    "ColorChoice",
    "color_enabled",
    "current_choice",
    "get_override",
    "parse_choice",
    "set_override",
]
