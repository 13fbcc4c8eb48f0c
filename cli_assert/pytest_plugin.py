"""Pytest plugin providing the ``assert_cli`` fixture."""

from __future__ import annotations

import logging
import os
import typing as t

import pytest

from . import color
from .assertion import Assert, Phase

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .assertion import CommandLike
    from .process import ProcessRunner

logger = logging.getLogger(__name__)

_OVERRIDE_INSTALLED = pytest.StashKey[bool]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("cli_assert")
    group.addoption(
        "--cli-assert-color",
        action="store",
        dest="cli_assert_color",
        choices=[choice.value for choice in color.ColorChoice],
        default=None,
        help=(
            "Colour diffs in cli-assert failure reports. Overrides the "
            "pytest.ini setting and the CLI_ASSERT_COLOR environment variable."
        ),
    )
    parser.addini(
        "cli_assert_color",
        "Colour choice for cli-assert diffs: always, never or auto.",
        default="",
    )
    parser.addini(
        "cli_assert_require_execution",
        (
            "Fail tests that create an Assert through the assert_cli fixture "
            "without executing it."
        ),
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin markers and install the session colour choice."""
    config.addinivalue_line(
        "markers",
        (
            "cli_assert(require_execution: bool = True): override the "
            "unexecuted-assertion check for a single test."
        ),
    )
    choice = _configured_color(config)
    config.stash[_OVERRIDE_INSTALLED] = choice is not None
    if choice is not None:
        logger.debug("Using cli-assert colour choice %s", choice)
        color.set_override(choice)


def pytest_unconfigure(config: pytest.Config) -> None:
    """Remove the session colour choice installed by :func:`pytest_configure`."""
    if config.stash.get(_OVERRIDE_INSTALLED, False):
        color.set_override(None)


def _configured_color(config: pytest.Config) -> color.ColorChoice | None:
    """Return the colour choice from the CLI option or ini file, if any."""
    cli_value = config.getoption("cli_assert_color", default=None)
    if cli_value is not None:
        return color.parse_choice(cli_value)
    ini_value = str(config.getini("cli_assert_color") or "")
    if ini_value.strip():
        return color.parse_choice(ini_value)
    return None


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach each phase's report to the item for the fixture teardown."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


class AssertFactory:
    """Create :class:`Assert` objects and remember them for teardown checks."""

    def __init__(self, *, runner: ProcessRunner | None = None) -> None:
        self._runner = runner
        self._created: list[Assert] = []

    def __call__(
        self,
        cmd: CommandLike,
        *args: str | os.PathLike[str],
        runner: ProcessRunner | None = None,
    ) -> Assert:
        """Return ``Assert.command(cmd).with_args(*args)``."""
        assertion = Assert.command(cmd, runner=runner or self._runner)
        if args:
            assertion.with_args(*args)
        self._created.append(assertion)
        return assertion

    @property
    def created(self) -> tuple[Assert, ...]:
        """Return every assertion built by this factory."""
        return tuple(self._created)

    def pending(self) -> list[Assert]:
        """Return assertions that were never executed."""
        return [a for a in self._created if a.phase is Phase.BUILT]


def _require_execution(request: pytest.FixtureRequest) -> bool:
    """Return whether unexecuted assertions should fail the test."""
    # Priority order: marker > ini setting
    marker = request.node.get_closest_marker("cli_assert")
    if marker is not None and "require_execution" in marker.kwargs:
        return bool(marker.kwargs["require_execution"])
    return bool(request.config.getini("cli_assert_require_execution"))


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)


@pytest.fixture
def assert_cli(
    request: pytest.FixtureRequest,
) -> t.Generator[AssertFactory, None, None]:
    """Provide a factory for :class:`Assert` objects.

    At teardown the test fails if an assertion was built but never executed,
    unless disabled by the ``cli_assert_require_execution`` ini setting or
    the ``cli_assert(require_execution=False)`` marker.
    """
    factory = AssertFactory()
    yield factory

    if not _require_execution(request) or _call_stage_failed(request.node):
        return
    pending = factory.pending()
    if not pending:
        return
    listing = "\n".join(f"  {' '.join(a.cmd)}" for a in pending)
    logger.debug("Found %d unexecuted assertions", len(pending))
    pytest.fail(f"Assert created but never executed:\n{listing}", pytrace=False)


__all__ = ["AssertFactory", "assert_cli"]
