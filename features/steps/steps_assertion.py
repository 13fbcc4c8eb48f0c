"""Step definitions for cli-assert behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import sys
import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from cli_assert import Assert, CliAssertError

PRINT_VARIABLE = "import os, sys; print(os.environ.get(sys.argv[1], ''))"
ECHO_STDIN = "import sys; sys.stdout.write(sys.stdin.read())"


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    assertion: Assert
    error: CliAssertError | None


def _python(context: BehaveContext, script: str, *args: str) -> None:
    context.assertion = Assert.command([sys.executable, "-c", script, *args])
    context.error = None


@given('a command that prints "{text}"')
def step_command_printing(context: BehaveContext, text: str) -> None:
    """Build an assertion for a command printing *text*."""
    _python(context, "import sys; print(sys.argv[1])", text)


@given("a command that exits with code {code:d}")
def step_command_exiting(context: BehaveContext, code: int) -> None:
    """Build an assertion for a command exiting with *code*."""
    _python(context, "import sys; sys.exit(int(sys.argv[1]))", str(code))


@given("a command that echoes its stdin")
def step_command_echoing(context: BehaveContext) -> None:
    """Build an assertion for a command copying stdin to stdout."""
    _python(context, ECHO_STDIN)


@given('a command that prints the variable "{name}"')
def step_command_printing_variable(context: BehaveContext, name: str) -> None:
    """Build an assertion for a command printing an environment variable."""
    _python(context, PRINT_VARIABLE, name)


@when('I expect stdout to be "{text}"')
def step_expect_stdout(context: BehaveContext, text: str) -> None:
    """Require stdout to equal *text*."""
    context.assertion.stdout().is_(text)


@when('I expect stdout to contain "{text}"')
def step_expect_stdout_contains(context: BehaveContext, text: str) -> None:
    """Require stdout to contain *text*."""
    context.assertion.stdout().contains(text)


@when("I expect the command to fail with code {code:d}")
def step_expect_exit_code(context: BehaveContext, code: int) -> None:
    """Require the command to fail with *code*."""
    context.assertion.fails_with(code)


@when('I write "{text}" to stdin')
def step_write_stdin(context: BehaveContext, text: str) -> None:
    """Queue *text* for the command's stdin."""
    context.assertion.stdin(text)


@when('I set the environment variable "{name}" to "{value}"')
def step_set_environment(context: BehaveContext, name: str, value: str) -> None:
    """Run the command with only *name* set."""
    context.assertion.with_env({name: value})


@when("I execute the assertion")
def step_execute(context: BehaveContext) -> None:
    """Execute the assertion and record any failure."""
    try:
        context.assertion.execute()
    except CliAssertError as err:
        context.error = err
    else:
        context.error = None


@then("the assertion passes")
def step_passes(context: BehaveContext) -> None:
    """Check that no error was raised."""
    assert context.error is None, context.error.display_chain()


@then('the assertion fails with "{text}"')
def step_fails_with(context: BehaveContext, text: str) -> None:
    """Check the failure report mentions *text*."""
    assert context.error is not None
    assert text in context.error.display_chain()


@then('the failure report contains "{text}"')
def step_report_contains(context: BehaveContext, text: str) -> None:
    """Check the failure report contains *text*."""
    assert context.error is not None
    assert text in context.error.display_chain()
