"""Global test configuration and shared fixtures."""

from __future__ import annotations

import shutil
import typing as t

import pytest

from cli_assert import color

pytest_plugins = ("cli_assert.pytest_plugin", "pytester")

_POSIX_TOOLS: t.Final[tuple[str, ...]] = ("echo", "cat", "printenv", "sh")


def _posix_tools_available() -> bool:
    """Return ``True`` when the external commands used in tests exist."""
    return all(shutil.which(tool) is not None for tool in _POSIX_TOOLS)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "requires_posix_tools: mark test as running echo, cat, printenv or sh",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip tests needing POSIX tools when they are not installed."""
    if _posix_tools_available():
        return
    skip = pytest.mark.skip(reason="POSIX command-line tools are not available")
    for item in items:
        if "requires_posix_tools" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def plain_diffs(monkeypatch: pytest.MonkeyPatch) -> t.Generator[None, None, None]:
    """Render diffs without colour unless a test opts in explicitly."""
    monkeypatch.delenv(color.COLOR_ENV, raising=False)
    previous = color.get_override()
    color.set_override(color.ColorChoice.NEVER)
    yield
    color.set_override(previous)
