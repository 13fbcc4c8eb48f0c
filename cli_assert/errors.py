"""Exception hierarchy for cli-assert.

Failures are layered with ordinary exception chaining: the orchestrator
raises :class:`AssertionFailedError` *from* the check that failed, an output
check raises :class:`OutputMismatchError` *from* the predicate error, and so
on. :meth:`CliAssertError.display_chain` walks that chain outermost first.
"""

from __future__ import annotations

import shlex
import typing as t

ERROR_PREFIX: t.Final[str] = "CLI assertion failed"


def format_command(cmd: t.Sequence[str]) -> str:
    """Return *cmd* as a shell-style command line."""
    return shlex.join(cmd)


def format_block(label: str, text: str) -> str:
    """Return ``label=```text```"" as used in failure reports."""
    return f"{label}=```{text}```"


class CliAssertError(Exception):
    """Base class for all cli-assert errors."""

    @property
    def cause(self) -> BaseException | None:
        """Return the error this one was raised from, if any."""
        return self.__cause__

    def iter_chain(self) -> t.Iterator[BaseException]:
        """Yield this error followed by each chained cause."""
        current: BaseException | None = self
        seen: set[int] = set()
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            yield current
            current = current.__cause__

    def display_chain(self) -> str:
        """Render the full cause chain, outermost error first."""
        lines: list[str] = []
        for index, err in enumerate(self.iter_chain()):
            label = "Error" if index == 0 else "Caused by"
            lines.append(f"{label}: {err}")
        return "\n".join(lines)


class LifecycleError(CliAssertError):
    """Raised when an :class:`~cli_assert.assertion.Assert` is reused."""


class SpawnError(CliAssertError):
    """The command could not be started at all."""

    def __init__(self, cmd: t.Sequence[str]) -> None:
        self.cmd = list(cmd)
        super().__init__(f"failed to spawn `{format_command(self.cmd)}`")


class StdinWriteError(CliAssertError):
    """A stdin write operation raised while feeding the child."""

    def __init__(self, cmd: t.Sequence[str]) -> None:
        self.cmd = list(cmd)
        super().__init__(f"failed to write stdin of `{format_command(self.cmd)}`")


class AssertionFailedError(CliAssertError):
    """Top-level failure of a single check, tagged with the command line."""

    def __init__(self, cmd: t.Sequence[str]) -> None:
        self.cmd = list(cmd)
        super().__init__(f"{ERROR_PREFIX}: `{format_command(self.cmd)}`")


class StatusMismatchError(CliAssertError):
    """Exit success or failure did not match the expectation."""

    def __init__(self, *, expected_success: bool, stdout: str, stderr: str) -> None:
        self.expected_success = expected_success
        self.stdout = stdout
        self.stderr = stderr
        expected = "succeed" if expected_success else "fail"
        got = "failed" if expected_success else "succeeded"
        super().__init__(
            "\n".join(
                [
                    f"command expected to {expected}",
                    f"status={got}",
                    format_block("stdout", stdout),
                    format_block("stderr", stderr),
                ]
            )
        )


class ExitCodeMismatchError(CliAssertError):
    """The exit code differed from the expected one."""

    def __init__(
        self, *, expected: int, got: int | None, stdout: str, stderr: str
    ) -> None:
        self.expected = expected
        self.got = got
        self.stdout = stdout
        self.stderr = stderr
        code = "<interrupted>" if got is None else str(got)
        super().__init__(
            "\n".join(
                [
                    f"exit code expected to be `{expected}`",
                    f"exit code=`{code}`",
                    format_block("stdout", stdout),
                    format_block("stderr", stderr),
                ]
            )
        )


class OutputMismatchError(CliAssertError):
    """A predicate failed on a specific output stream."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"{kind} mismatch")


class PredicateError(CliAssertError):
    """Base class for content mismatches reported by predicates."""


class NotEqualError(PredicateError):
    """Output was expected to equal a value but differed."""

    def __init__(self, expected: str, got: str, diff: str) -> None:
        self.expected = expected
        self.got = got
        self.diff = diff
        super().__init__(f"diff:\n{diff}")


class UnexpectedEqualError(PredicateError):
    """Output was expected to differ from a value but matched it."""

    def __init__(self, got: str) -> None:
        self.got = got
        super().__init__(f"expected to not match\n{format_block('output', got)}")


class DoesNotContainError(PredicateError):
    """The needle was missing from the output."""

    def __init__(self, needle: str, haystack: str) -> None:
        self.needle = needle
        self.haystack = haystack
        super().__init__(
            f"expected to contain {needle}\n{format_block('output', haystack)}"
        )


class UnexpectedContainsError(PredicateError):
    """The needle was found although it should be absent."""

    def __init__(self, needle: str, haystack: str) -> None:
        self.needle = needle
        self.haystack = haystack
        super().__init__(
            f"expected to not contain {needle}\n{format_block('output', haystack)}"
        )


class PredicateFailedError(PredicateError):
    """A user-supplied predicate returned a falsy value."""

    def __init__(self, message: str, got: str) -> None:
        self.message = message
        self.got = got
        super().__init__(f"{message}\n{format_block('output', got)}")


class RegexMismatchError(PredicateError):
    """A regular expression matched the wrong number of times."""

    def __init__(
        self,
        pattern: str,
        got: str,
        *,
        expected_count: int | None = None,
        observed_count: int | None = None,
    ) -> None:
        self.pattern = pattern
        self.got = got
        self.expected_count = expected_count
        self.observed_count = observed_count
        if expected_count is None:
            headline = f"expected {pattern} to match"
        else:
            headline = (
                f"expected {pattern} to match {expected_count} times, "
                f"matched {observed_count} times"
            )
        super().__init__(f"{headline}\n{format_block('output', got)}")


__all__ = [
    "ERROR_PREFIX",
    "AssertionFailedError",
    "CliAssertError",
    "DoesNotContainError",
    "ExitCodeMismatchError",
    "LifecycleError",
    "NotEqualError",
    "OutputMismatchError",
    "PredicateError",
    "PredicateFailedError",
    "RegexMismatchError",
    "SpawnError",
    "StatusMismatchError",
    "StdinWriteError",
    "UnexpectedContainsError",
    "UnexpectedEqualError",
    "format_block",
    "format_command",
]
