"""Behave hooks for cli-assert features."""
# pyright: reportMissingImports=false

from __future__ import annotations

import typing as t

from cli_assert import color

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from behave.runner import Context


def before_all(context: Context) -> None:
    """Render diffs without colour so reports can be matched as text."""
    del context
    color.set_override(color.ColorChoice.NEVER)


def after_all(context: Context) -> None:
    """Drop the colour override."""
    del context
    color.set_override(None)
