"""Assertions about the exit status and output of command-line programs.

Build an :class:`Assert` for a command, declare what its exit status and
output streams should look like, then run it once with
:meth:`Assert.execute` (raises a typed error) or :meth:`Assert.unwrap`
(raises :class:`AssertionError` with the full failure report).
"""

from __future__ import annotations

from .assertion import Assert, OutputAssertionBuilder, Phase
from .content import (
    Contains,
    Content,
    ContentPredicate,
    Is,
    MatchesRegex,
    Satisfies,
)
from .diff import Changeset, DiffKind, Difference, changeset, render, render_diff
from .environment import Environment
from .errors import (
    AssertionFailedError,
    CliAssertError,
    DoesNotContainError,
    ExitCodeMismatchError,
    LifecycleError,
    NotEqualError,
    OutputMismatchError,
    PredicateError,
    PredicateFailedError,
    RegexMismatchError,
    SpawnError,
    StatusMismatchError,
    StdinWriteError,
    UnexpectedContainsError,
    UnexpectedEqualError,
)
from .output import OutputKind, OutputPredicate
from .process import CapturedOutput, ProcessRequest, run_process
from .shortcuts import assert_cli_output, assert_cli_output_error

__all__ = [
    "Assert",
    "AssertionFailedError",
    "CapturedOutput",
    "Changeset",
    "CliAssertError",
    "Contains",
    "Content",
    "ContentPredicate",
    "DiffKind",
    "Difference",
    "DoesNotContainError",
    "Environment",
    "ExitCodeMismatchError",
    "Is",
    "LifecycleError",
    "MatchesRegex",
    "NotEqualError",
    "OutputAssertionBuilder",
    "OutputKind",
    "OutputMismatchError",
    "OutputPredicate",
    "Phase",
    "PredicateError",
    "PredicateFailedError",
    "ProcessRequest",
    "RegexMismatchError",
    "Satisfies",
    "SpawnError",
    "StatusMismatchError",
    "StdinWriteError",
    "UnexpectedContainsError",
    "UnexpectedEqualError",
    "assert_cli_output",
    "assert_cli_output_error",
    "changeset",
    "render",
    "render_diff",
    "run_process",
]
