"""Fluent assertions about running a command-line program.

An :class:`Assert` collects the command, its environment and input, and the
expectations about its exit status and output. :meth:`Assert.execute` runs
the command once and checks every expectation against the captured result:

    Assert.command(["echo", "42"]).stdout().is_("42").unwrap()
"""

from __future__ import annotations

import enum
import logging
import os
import shlex
import typing as t
from pathlib import Path

from ._validators import validate_exit_code, validate_match_count
from .content import Contains, Is, MatchesRegex, Satisfies
from .environment import Environment
from .errors import AssertionFailedError, CliAssertError, LifecycleError
from .output import OutputKind, OutputPredicate
from .process import ProcessRequest, run_process
from .verifiers import ExitCodeVerifier, OutputVerifier, StatusVerifier

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    import re

    from .content import ContentLike, ContentPredicate
    from .environment import EnvironmentLike
    from .process import CapturedOutput, ProcessRunner, StdinSource

logger = logging.getLogger(__name__)

CommandLike: t.TypeAlias = "str | os.PathLike[str] | t.Sequence[str | os.PathLike[str]]"


class Phase(enum.StrEnum):
    """Lifecycle phases for :class:`Assert`."""

    BUILT = "BUILT"
    EXECUTING = "EXECUTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


def _split_command(cmd: CommandLike) -> list[str]:
    if isinstance(cmd, str):
        return shlex.split(cmd)
    if isinstance(cmd, os.PathLike):
        return [os.fspath(cmd)]
    return [os.fspath(part) for part in cmd]


class Assert:
    """Assertions for a specific command.

    By default the command inherits the caller's environment and is expected
    to exit successfully.
    """

    def __init__(
        self, cmd: CommandLike, *, runner: ProcessRunner | None = None
    ) -> None:
        """Create assertions for *cmd*.

        Parameters
        ----------
        cmd:
            The program followed by its arguments, or a single string split
            with :func:`shlex.split`.
        runner:
            Callable used to execute the command. Defaults to
            :func:`cli_assert.process.run_process`; tests can pass a fake that
            returns a canned :class:`~cli_assert.process.CapturedOutput`.
        """
        argv = _split_command(cmd)
        if not argv:
            msg = "command must not be empty"
            raise ValueError(msg)
        self._cmd = argv
        self._env = Environment.inherit()
        self._current_dir: Path | None = None
        self._expect_success: bool | None = True
        self._expect_exit_code: int | None = None
        self._expect_output: list[OutputPredicate] = []
        self._stdin: list[StdinSource] = []
        self._runner: ProcessRunner = runner if runner is not None else run_process
        self._phase = Phase.BUILT

    @classmethod
    def command(
        cls, cmd: CommandLike, *, runner: ProcessRunner | None = None
    ) -> Assert:
        """Run a custom command."""
        return cls(cmd, runner=runner)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def cmd(self) -> list[str]:
        """Return a copy of the command line."""
        return list(self._cmd)

    @property
    def phase(self) -> Phase:
        """Return the current lifecycle phase."""
        return self._phase

    @property
    def expect_success(self) -> bool | None:
        """Return the expected exit success, or ``None`` if ignored."""
        return self._expect_success

    @property
    def expect_exit_code(self) -> int | None:
        """Return the expected exit code, if any."""
        return self._expect_exit_code

    @property
    def output_predicates(self) -> tuple[OutputPredicate, ...]:
        """Return the output predicates in evaluation order."""
        return tuple(self._expect_output)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Assert(cmd={self._cmd!r}, phase={self._phase.value})"

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def _require_built(self) -> None:
        if self._phase is not Phase.BUILT:
            msg = f"Assert for `{shlex.join(self._cmd)}` was already executed"
            raise LifecycleError(msg)

    def with_args(self, *args: str | os.PathLike[str]) -> Assert:
        """Append ``args`` to the command line."""
        self._require_built()
        self._cmd.extend(os.fspath(arg) for arg in args)
        return self

    def stdin(self, contents: StdinSource) -> Assert:
        """Add one write to the child's stdin.

        ``contents`` is written as-is when it is ``bytes``, encoded as UTF-8
        when it is ``str``, or called with the binary stdin pipe when it is
        callable. Writes happen in the order they were added, and stdin is
        closed after the last one.
        """
        self._require_built()
        if isinstance(contents, bytearray | memoryview):
            contents = bytes(contents)
        elif not isinstance(contents, str | bytes) and not callable(contents):
            msg = "stdin contents must be str, bytes or a callable"
            raise TypeError(msg)
        self._stdin.append(contents)
        return self

    def current_dir(self, path: str | os.PathLike[str]) -> Assert:
        """Run the command in *path*."""
        self._require_built()
        self._current_dir = Path(path)
        return self

    def with_env(self, env: EnvironmentLike) -> Assert:
        """Set the child's environment.

        Mappings and key/value pairs start from an empty environment; pass
        ``Environment.inherit().insert(...)`` to extend the caller's.
        """
        self._require_built()
        self._env = Environment.coerce(env)
        return self

    def and_(self) -> Assert:
        """Return ``self``; makes chains read more naturally."""
        return self

    def succeeds(self) -> Assert:
        """Expect the command to exit successfully."""
        self._require_built()
        self._expect_exit_code = None
        self._expect_success = True
        return self

    def fails(self) -> Assert:
        """Expect the command to run and exit unsuccessfully."""
        self._require_built()
        self._expect_success = False
        return self

    def fails_with(self, code: int) -> Assert:
        """Expect the command to fail with exit code *code*."""
        self._require_built()
        validate_exit_code(code)
        self._expect_success = False
        self._expect_exit_code = code
        return self

    def ignore_status(self) -> Assert:
        """Do not check the exit status or code."""
        self._require_built()
        self._expect_exit_code = None
        self._expect_success = None
        return self

    def stdout(self) -> OutputAssertionBuilder:
        """Start an assertion about stdout."""
        self._require_built()
        return OutputAssertionBuilder(self, OutputKind.STDOUT)

    def stderr(self) -> OutputAssertionBuilder:
        """Start an assertion about stderr."""
        self._require_built()
        return OutputAssertionBuilder(self, OutputKind.STDERR)

    def _add_output(self, predicate: OutputPredicate) -> Assert:
        self._require_built()
        self._expect_output.append(predicate)
        return self

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def _request(self) -> ProcessRequest:
        return ProcessRequest(
            argv=tuple(self._cmd),
            env=self._env.compile(),
            cwd=self._current_dir,
            stdin=tuple(self._stdin),
        )

    def _check(self, output: CapturedOutput) -> None:
        verifiers = (
            StatusVerifier(self._expect_success),
            ExitCodeVerifier(self._expect_exit_code),
            OutputVerifier(self._expect_output),
        )
        for verifier in verifiers:
            try:
                verifier.verify(output)
            except CliAssertError as exc:
                raise AssertionFailedError(self._cmd) from exc

    def execute(self) -> None:
        """Run the command and check every expectation.

        The first failing check raises :class:`AssertionFailedError` chained
        to the specific mismatch; later checks are not evaluated. Failure to
        start the command raises :class:`~cli_assert.errors.SpawnError`.
        An :class:`Assert` can only be executed once.
        """
        self._require_built()
        self._phase = Phase.EXECUTING
        try:
            output = self._runner(self._request())
            self._check(output)
        except BaseException:
            self._phase = Phase.FAILED
            logger.info("Assertion failed for %s", shlex.join(self._cmd))
            raise
        self._phase = Phase.SUCCEEDED
        logger.debug("Assertion passed for %s", shlex.join(self._cmd))

    def unwrap(self) -> None:
        """Execute and raise :class:`AssertionError` on any failure.

        The error message contains the whole cause chain, from the command
        line down to the diff or offending output.
        """
        try:
            self.execute()
        except CliAssertError as err:
            raise AssertionError(err.display_chain()) from err


class OutputAssertionBuilder:
    """Attach a predicate about one output stream to an :class:`Assert`."""

    def __init__(self, assertion: Assert, kind: OutputKind) -> None:
        self._assertion = assertion
        self._kind = kind

    @property
    def kind(self) -> OutputKind:
        """Return the stream this builder targets."""
        return self._kind

    def _attach(self, predicate: ContentPredicate) -> Assert:
        output_predicate = OutputPredicate(self._kind, predicate)
        return self._assertion._add_output(output_predicate)  # noqa: SLF001

    def is_(self, output: ContentLike) -> Assert:
        """Expect the output to be exactly *output*.

        Text is compared after trimming surrounding whitespace on both sides.
        """
        return self._attach(Is(output))

    def isnt(self, output: ContentLike) -> Assert:
        """Expect the output to differ from *output*."""
        return self._attach(Is(output, expected_result=False))

    def contains(self, output: ContentLike) -> Assert:
        """Expect the output to contain *output*."""
        return self._attach(Contains(output))

    def doesnt_contain(self, output: ContentLike) -> Assert:
        """Expect the output not to contain *output*."""
        return self._attach(Contains(output, expected_result=False))

    def satisfies(self, func: t.Callable[[str], object], message: str) -> Assert:
        """Expect ``func(output)`` to be truthy; *message* explains failures."""
        if not callable(func):
            msg = "predicate must be callable"
            raise TypeError(msg)
        return self._attach(Satisfies(func, str(message)))

    def matches(self, pattern: str | bytes | re.Pattern[t.Any]) -> Assert:
        """Expect *pattern* to match somewhere in the output."""
        return self._attach(MatchesRegex(pattern))

    def matches_ntimes(
        self, pattern: str | bytes | re.Pattern[t.Any], count: int
    ) -> Assert:
        """Expect exactly *count* non-overlapping matches of *pattern*."""
        validate_match_count(count)
        return self._attach(MatchesRegex(pattern, count))


__all__ = ["Assert", "CommandLike", "OutputAssertionBuilder", "Phase"]
