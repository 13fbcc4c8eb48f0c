"""Behavioural tests for :class:`cli_assert.Assert` using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenario

from tests.steps import *  # noqa: F403 - re-export pytest-bdd steps

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"
FEATURE = str(FEATURES_DIR / "assertion.feature")


@scenario(FEATURE, "successful command with matching stdout")
def test_successful_command() -> None:
    """A passing command with matching output passes."""


@scenario(FEATURE, "mismatched stdout is reported with a diff")
def test_mismatched_stdout() -> None:
    """Output mismatches show a diff."""


@scenario(FEATURE, "unexpected failure is reported")
def test_unexpected_failure() -> None:
    """Failing commands fail the default success check."""


@scenario(FEATURE, "expected exit code")
def test_expected_exit_code() -> None:
    """Matching exit codes pass."""


@scenario(FEATURE, "wrong exit code")
def test_wrong_exit_code() -> None:
    """Different exit codes are reported."""


@scenario(FEATURE, "stdin is forwarded to the command")
def test_stdin_forwarded() -> None:
    """Queued stdin writes reach the command in order."""


@scenario(FEATURE, "the command sees exactly the given environment")
def test_exact_environment() -> None:
    """The child's environment contains only the given variables."""


@scenario(FEATURE, "an assertion runs only once")
def test_runs_once() -> None:
    """Executing twice is a lifecycle error."""
