"""One-call helpers for the most common checks."""

from __future__ import annotations

import os
import typing as t

from .assertion import Assert

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .process import ProcessRunner


def assert_cli_output(
    cmd: str | os.PathLike[str],
    args: t.Sequence[str | os.PathLike[str]],
    expected_output: str,
    *,
    runner: ProcessRunner | None = None,
) -> None:
    """Run ``cmd args...`` and require success with stdout equal to *expected_output*.

    Raises :class:`~cli_assert.errors.CliAssertError` on failure.
    """
    Assert.command([cmd, *args], runner=runner).succeeds().stdout().is_(
        expected_output
    ).execute()


def assert_cli_output_error(
    cmd: str | os.PathLike[str],
    args: t.Sequence[str | os.PathLike[str]],
    error_code: int | None,
    expected_output: str,
    *,
    runner: ProcessRunner | None = None,
) -> None:
    """Run ``cmd args...`` and require failure with stderr equal to *expected_output*.

    When *error_code* is not ``None`` the exit code must match it exactly.
    """
    assertion = Assert.command([cmd, *args], runner=runner)
    if error_code is None:
        assertion.fails()
    else:
        assertion.fails_with(error_code)
    assertion.stderr().is_(expected_output).execute()


__all__ = ["assert_cli_output", "assert_cli_output_error"]
