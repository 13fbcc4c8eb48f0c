"""Checks applied to a :class:`~cli_assert.process.CapturedOutput`."""

from __future__ import annotations

import typing as t

from .content import decode_lossy
from .errors import ExitCodeMismatchError, StatusMismatchError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .output import OutputPredicate
    from .process import CapturedOutput


def _streams(output: CapturedOutput) -> dict[str, str]:
    return {
        "stdout": decode_lossy(output.stdout),
        "stderr": decode_lossy(output.stderr),
    }


class StatusVerifier:
    """Compare the exit success against an expectation."""

    def __init__(self, expect_success: bool | None) -> None:
        self._expect_success = expect_success

    def verify(self, output: CapturedOutput) -> None:
        """Raise :class:`StatusMismatchError` if the status is wrong."""
        if self._expect_success is None:
            return
        if self._expect_success == output.success:
            return
        raise StatusMismatchError(
            expected_success=self._expect_success, **_streams(output)
        )


class ExitCodeVerifier:
    """Compare the exit code against an exact expectation."""

    def __init__(self, expect_exit_code: int | None) -> None:
        self._expect_exit_code = expect_exit_code

    def verify(self, output: CapturedOutput) -> None:
        """Raise :class:`ExitCodeMismatchError` if the code differs."""
        if self._expect_exit_code is None:
            return
        if self._expect_exit_code == output.exit_code:
            return
        raise ExitCodeMismatchError(
            expected=self._expect_exit_code,
            got=output.exit_code,
            **_streams(output),
        )


class OutputVerifier:
    """Evaluate output predicates in order, stopping at the first failure."""

    def __init__(self, predicates: t.Sequence[OutputPredicate]) -> None:
        self._predicates = tuple(predicates)

    def verify(self, output: CapturedOutput) -> None:
        """Raise the first predicate's :class:`OutputMismatchError`."""
        for predicate in self._predicates:
            predicate.verify(output)


__all__ = ["ExitCodeVerifier", "OutputVerifier", "StatusVerifier"]
