"""Unit tests for :mod:`cli_assert.assertion`."""

from __future__ import annotations

import os
import sys
import typing as t
from pathlib import Path

import pytest

from cli_assert.assertion import Assert, OutputAssertionBuilder, Phase
from cli_assert.environment import Environment
from cli_assert.errors import (
    AssertionFailedError,
    DoesNotContainError,
    ExitCodeMismatchError,
    LifecycleError,
    NotEqualError,
    OutputMismatchError,
    PredicateFailedError,
    SpawnError,
    StatusMismatchError,
)
from cli_assert.output import OutputKind
from cli_assert.unittests._fake_runner import FailingRunner, FakeRunner


def _failure(assertion: Assert) -> AssertionFailedError:
    with pytest.raises(AssertionFailedError) as excinfo:
        assertion.execute()
    return excinfo.value


def test_defaults() -> None:
    """A fresh Assert expects success and inherits the environment."""
    runner = FakeRunner()
    assertion = Assert(["tool"], runner=runner)
    assert assertion.phase is Phase.BUILT
    assert assertion.expect_success is True
    assert assertion.expect_exit_code is None
    assert assertion.output_predicates == ()
    assertion.execute()
    assert assertion.phase is Phase.SUCCEEDED
    request = runner.last_request
    assert request.argv == ("tool",)
    assert request.env == dict(os.environ)
    assert request.cwd is None
    assert request.stdin == ()


def test_string_commands_are_split() -> None:
    """A single string is split like a shell would."""
    assertion = Assert.command("tool --name 'a b'")
    assert assertion.cmd == ["tool", "--name", "a b"]


def test_with_args_appends_in_order(tmp_path: Path) -> None:
    """Arguments accumulate across calls and accept paths."""
    assertion = Assert.command(["tool"]).with_args("a").with_args("b", tmp_path)
    assert assertion.cmd == ["tool", "a", "b", str(tmp_path)]


@pytest.mark.parametrize("cmd", ["", [], "   "])
def test_empty_command_is_rejected(cmd: str | list[str]) -> None:
    """A command needs at least a program."""
    with pytest.raises(ValueError, match="must not be empty"):
        Assert(cmd)


def test_request_carries_configuration(tmp_path: Path) -> None:
    """Environment, input and working directory reach the runner."""
    runner = FakeRunner()

    def writer(pipe: t.BinaryIO) -> None:
        pipe.write(b"!")

    Assert.command(["tool"], runner=runner).with_env({"KEY": "value"}).stdin(
        "text"
    ).stdin(b"raw").stdin(writer).current_dir(tmp_path).execute()
    request = runner.last_request
    assert request.env == {"KEY": "value"}
    assert request.stdin == ("text", b"raw", writer)
    assert request.cwd == tmp_path


def test_with_env_accepts_environment() -> None:
    """Inherited environments can be extended."""
    runner = FakeRunner()
    env = Environment.inherit().insert("CLI_ASSERT_EXTRA", "1")
    Assert.command(["tool"], runner=runner).with_env(env).execute()
    assert runner.last_request.env["CLI_ASSERT_EXTRA"] == "1"
    assert runner.last_request.env.get("PATH") == os.environ.get("PATH")


def test_stdin_rejects_other_types() -> None:
    """Only text, bytes and writers are valid stdin sources."""
    with pytest.raises(TypeError, match="stdin contents"):
        Assert.command(["tool"]).stdin(42)  # type: ignore[arg-type]


def test_and_is_identity() -> None:
    """``and_`` returns the same builder."""
    assertion = Assert.command(["tool"])
    assert assertion.and_() is assertion


def test_output_builders_target_streams() -> None:
    """``stdout`` and ``stderr`` return builders for their streams."""
    assertion = Assert.command(["tool"])
    out = assertion.stdout()
    assert isinstance(out, OutputAssertionBuilder)
    assert out.kind is OutputKind.STDOUT
    assert assertion.stderr().kind is OutputKind.STDERR
    assert out.is_("x") is assertion
    assert [p.kind for p in assertion.output_predicates] == [OutputKind.STDOUT]


def test_unexpected_failure_reports_status() -> None:
    """A failing command fails the default success check."""
    runner = FakeRunner(exit_code=1, stderr="boom")
    assertion = Assert.command(["tool", "x"], runner=runner)
    err = _failure(assertion)
    assert assertion.phase is Phase.FAILED
    assert str(err) == "CLI assertion failed: `tool x`"
    assert isinstance(err.cause, StatusMismatchError)
    assert "stderr=```boom```" in err.display_chain()


def test_fails_accepts_any_nonzero_code() -> None:
    """``fails`` only requires an unsuccessful exit."""
    Assert.command(["tool"], runner=FakeRunner(exit_code=3)).fails().execute()


def test_fails_rejects_success() -> None:
    """``fails`` rejects a successful exit."""
    err = _failure(Assert.command(["tool"], runner=FakeRunner()).fails())
    assert isinstance(err.cause, StatusMismatchError)
    assert "command expected to fail" in str(err.cause)


def test_fails_with_checks_exact_code() -> None:
    """``fails_with`` compares the exit code exactly."""
    runner = FakeRunner(exit_code=1)
    Assert.command(["tool"], runner=runner).fails_with(1).execute()
    err = _failure(Assert.command(["tool"], runner=runner).fails_with(2))
    assert isinstance(err.cause, ExitCodeMismatchError)
    assert err.cause.got == 1


def test_fails_with_rejects_signal() -> None:
    """A signalled process has no exit code to match."""
    runner = FakeRunner(exit_code=None, signal=15)
    err = _failure(Assert.command(["tool"], runner=runner).fails_with(1))
    assert "exit code=`<interrupted>`" in err.display_chain()


def test_fails_with_zero_reports_status_first() -> None:
    """Expecting failure with code 0 can never pass."""
    err = _failure(Assert.command(["tool"], runner=FakeRunner()).fails_with(0))
    assert isinstance(err.cause, StatusMismatchError)


@pytest.mark.parametrize("code", ["1", 1.0, True, None])
def test_fails_with_validates_code(code: object) -> None:
    """Exit codes must be integers."""
    with pytest.raises(TypeError):
        Assert.command(["tool"]).fails_with(code)  # type: ignore[arg-type]


def test_succeeds_clears_exit_code() -> None:
    """``succeeds`` overrides an earlier ``fails_with``."""
    assertion = Assert.command(["tool"], runner=FakeRunner()).fails_with(2)
    assertion.succeeds().execute()
    assert assertion.expect_exit_code is None


def test_ignore_status() -> None:
    """``ignore_status`` skips status and exit code checks."""
    assertion = Assert.command(["tool"], runner=FakeRunner(exit_code=9))
    assertion.fails_with(1).ignore_status()
    assert assertion.expect_success is None
    assert assertion.expect_exit_code is None
    assertion.execute()


def test_output_mismatch_chain() -> None:
    """Output failures nest the stream and the diff."""
    runner = FakeRunner(stdout="hello\n")
    err = _failure(Assert.command(["tool"], runner=runner).stdout().is_("goodbye"))
    chain = list(err.iter_chain())
    assert [type(e) for e in chain] == [
        AssertionFailedError,
        OutputMismatchError,
        NotEqualError,
    ]
    assert str(chain[1]) == "stdout mismatch"
    assert err.display_chain().endswith("diff:\n-goodbye\n+hello\n")


def test_checks_run_in_order_and_stop_early() -> None:
    """The status check runs before output checks and failures stop evaluation."""
    calls: list[str] = []

    def record(text: str) -> bool:
        calls.append(text)
        return True

    runner = FakeRunner(exit_code=1, stdout="out")
    assertion = Assert.command(["tool"], runner=runner).stdout().satisfies(
        record, "recorded"
    )
    err = _failure(assertion)
    assert isinstance(err.cause, StatusMismatchError)
    assert calls == []


def test_first_output_failure_wins() -> None:
    """Only the first failing output predicate is reported."""
    calls: list[str] = []

    def record(text: str) -> bool:
        calls.append(text)
        return True

    runner = FakeRunner(stdout="abc", stderr="warn")
    assertion = (
        Assert.command(["tool"], runner=runner)
        .stdout()
        .contains("b")
        .stderr()
        .contains("error")
        .stdout()
        .satisfies(record, "recorded")
    )
    err = _failure(assertion)
    assert isinstance(err.cause, OutputMismatchError)
    assert err.cause.kind == "stderr"
    assert isinstance(err.cause.cause, DoesNotContainError)
    assert calls == []


def test_output_predicates_all_pass() -> None:
    """Every builder method can be combined on one Assert."""
    runner = FakeRunner(stdout="42\n", stderr="warning: 1 2 3")
    (
        Assert.command(["tool"], runner=runner)
        .stdout()
        .is_("42")
        .and_()
        .stdout()
        .isnt("43")
        .stderr()
        .contains("warning")
        .stderr()
        .doesnt_contain("error")
        .stderr()
        .satisfies(lambda text: text.startswith("warn"), "starts with warn")
        .stderr()
        .matches(r"\d")
        .stderr()
        .matches_ntimes(r"\d", 3)
        .execute()
    )


def test_satisfies_failure_message() -> None:
    """The caller's message is reported for predicate failures."""
    runner = FakeRunner(stdout="x")
    assertion = Assert.command(["tool"], runner=runner)
    assertion.stdout().satisfies(lambda text: len(text) > 5, "output too short")
    err = _failure(assertion)
    predicate_error = list(err.iter_chain())[-1]
    assert isinstance(predicate_error, PredicateFailedError)
    assert str(predicate_error) == "output too short\noutput=```x```"


def test_satisfies_requires_callable() -> None:
    """Non-callables are rejected when building."""
    builder = Assert.command(["tool"]).stdout()
    with pytest.raises(TypeError, match="callable"):
        builder.satisfies("nope", "msg")  # type: ignore[arg-type]


def test_matches_ntimes_validates_count() -> None:
    """Negative match counts are rejected when building."""
    with pytest.raises(ValueError, match="count"):
        Assert.command(["tool"]).stdout().matches_ntimes("a", -1)


def test_executing_twice_is_a_lifecycle_error() -> None:
    """An Assert runs only once."""
    runner = FakeRunner()
    assertion = Assert.command(["tool"], runner=runner)
    assertion.execute()
    with pytest.raises(LifecycleError, match="already executed"):
        assertion.execute()
    with pytest.raises(LifecycleError):
        assertion.with_args("late")
    assert len(runner.requests) == 1


def test_spawn_errors_are_not_wrapped() -> None:
    """Failure to start the command propagates as :class:`SpawnError`."""
    error = SpawnError(["tool"])
    assertion = Assert.command(["tool"], runner=FailingRunner(error))
    with pytest.raises(SpawnError) as excinfo:
        assertion.execute()
    assert excinfo.value is error
    assert assertion.phase is Phase.FAILED


def test_unwrap_raises_assertion_error_with_chain() -> None:
    """``unwrap`` converts failures into a plain AssertionError."""
    runner = FakeRunner(stdout="hello")
    assertion = Assert.command(["tool", "arg"], runner=runner).stdout().is_("bye")
    with pytest.raises(AssertionError) as excinfo:
        assertion.unwrap()
    message = str(excinfo.value)
    assert message.startswith("Error: CLI assertion failed: `tool arg`")
    assert "Caused by: stdout mismatch" in message
    assert "diff:" in message
    assert isinstance(excinfo.value.__cause__, AssertionFailedError)


def test_unwrap_passes() -> None:
    """``unwrap`` returns quietly when every check passes."""
    Assert.command(["tool"], runner=FakeRunner(stdout="ok")).stdout().is_(
        "ok"
    ).unwrap()


def test_repr() -> None:
    """The representation shows the command and phase."""
    assert repr(Assert.command(["tool", "x"])) == (
        "Assert(cmd=['tool', 'x'], phase=BUILT)"
    )


class TestRealCommands:
    """End-to-end checks against real programs."""

    def test_python_stdout(self) -> None:
        """A successful program's stdout is compared after trimming."""
        Assert.command([sys.executable, "-c", "print(42)"]).stdout().is_(
            "42"
        ).unwrap()

    def test_python_stdin_round_trip(self) -> None:
        """Input written to stdin is read by the child."""
        script = "import sys; print(sys.stdin.read().upper())"
        Assert.command([sys.executable, "-c", script]).stdin("abc").stdout().is_(
            "ABC"
        ).unwrap()

    @pytest.mark.requires_posix_tools
    def test_echo(self) -> None:
        """``echo 42`` succeeds and prints 42."""
        Assert.command(["echo", "42"]).stdout().is_("42").unwrap()

    @pytest.mark.requires_posix_tools
    def test_cat_missing_file(self) -> None:
        """``cat`` reports missing files on stderr with exit code 1."""
        (
            Assert.command(["cat", "non-existing-file"])
            .fails_with(1)
            .and_()
            .stderr()
            .contains("non-existing-file")
            .unwrap()
        )

    @pytest.mark.requires_posix_tools
    def test_printenv_exact_environment(self) -> None:
        """``with_env`` gives the child exactly the requested variables."""
        Assert.command(["printenv"]).with_env({"KEY": "value"}).stdout().is_(
            "KEY=value"
        ).unwrap()
        err = _failure(
            Assert.command(["printenv"]).with_env({"KEY": "value"}).stdout().is_(
                "KEY=other"
            )
        )
        assert isinstance(err.cause, OutputMismatchError)

    def test_missing_program(self) -> None:
        """Unknown programs raise :class:`SpawnError`."""
        with pytest.raises(SpawnError):
            Assert.command(["cli-assert-no-such-program"]).execute()
