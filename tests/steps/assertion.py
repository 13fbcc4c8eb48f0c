"""pytest-bdd steps that build and execute assertions."""

from __future__ import annotations

from pytest_bdd import given, parsers, then, when

from tests.helpers.scenario import (
    ECHO_STDIN,
    PRINT_VARIABLE,
    AssertionRun,
    exiting,
    printing,
    python_command,
)


@given(parsers.cfparse('a command that prints "{text}"'), target_fixture="run")
def command_printing(text: str) -> AssertionRun:
    """Build an assertion for a command printing *text*."""
    return AssertionRun(printing(text))


@given(
    parsers.cfparse("a command that exits with code {code:d}"),
    target_fixture="run",
)
def command_exiting(code: int) -> AssertionRun:
    """Build an assertion for a command exiting with *code*."""
    return AssertionRun(exiting(code))


@given("a command that echoes its stdin", target_fixture="run")
def command_echoing() -> AssertionRun:
    """Build an assertion for a command copying stdin to stdout."""
    return AssertionRun(python_command(ECHO_STDIN))


@given(
    parsers.cfparse('a command that prints the variable "{name}"'),
    target_fixture="run",
)
def command_printing_variable(name: str) -> AssertionRun:
    """Build an assertion for a command printing an environment variable."""
    return AssertionRun(python_command(PRINT_VARIABLE, name))


@when(parsers.cfparse('I expect stdout to be "{text}"'))
def expect_stdout(run: AssertionRun, text: str) -> None:
    """Require stdout to equal *text*."""
    run.assertion.stdout().is_(text)


@when(parsers.cfparse('I expect stdout to contain "{text}"'))
def expect_stdout_contains(run: AssertionRun, text: str) -> None:
    """Require stdout to contain *text*."""
    run.assertion.stdout().contains(text)


@when(parsers.cfparse("I expect the command to fail with code {code:d}"))
def expect_exit_code(run: AssertionRun, code: int) -> None:
    """Require the command to fail with *code*."""
    run.assertion.fails_with(code)


@when(parsers.cfparse('I write "{text}" to stdin'))
def write_stdin(run: AssertionRun, text: str) -> None:
    """Queue *text* for the command's stdin."""
    run.assertion.stdin(text)


@when(parsers.cfparse('I set the environment variable "{name}" to "{value}"'))
def set_environment(run: AssertionRun, name: str, value: str) -> None:
    """Run the command with only *name* set."""
    run.assertion.with_env({name: value})


@when("I execute the assertion")
def execute_assertion(run: AssertionRun) -> None:
    """Execute the assertion and record the outcome."""
    run.execute()


@then("the assertion passes")
def assertion_passes(run: AssertionRun) -> None:
    """Check that no error was raised."""
    assert run.error is None, run.report


@then(parsers.cfparse('the assertion fails with "{text}"'))
def assertion_fails(run: AssertionRun, text: str) -> None:
    """Check the failure report mentions *text*."""
    assert run.error is not None
    assert text in run.report


@then(parsers.cfparse('the failure report contains "{text}"'))
def report_contains(run: AssertionRun, text: str) -> None:
    """Check the failure report contains *text*."""
    assert text in run.report
